"""
Employee schemas
"""
from pydantic import BaseModel, ConfigDict
from app.models.employee import Role


class EmployeeRef(BaseModel):
    """Minimal employee for embedding in leave and attendance payloads"""
    id: int
    emp_code: str
    first_name: str
    last_name: str
    role: Role

    model_config = ConfigDict(from_attributes=True)
