from pydantic import BaseModel


class CourseRead(BaseModel):
    id: int
    name: str
    course_code: str | None = None
    total_students: int = 0
