from pydantic import BaseModel


class ManagerAssignment(BaseModel):
    user_id: str


class OwnershipTransfer(BaseModel):
    user_id: str


class ManagerResponse(BaseModel):
    user_id: str
