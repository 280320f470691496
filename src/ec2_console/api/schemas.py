from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class TagSchema(BaseModel):
    key: str
    value: str = ""


class InstanceSchema(BaseModel):
    id: str
    name: str
    type: str
    state: str
    public_ip: str
    private_ip: str
    availability_zone: str
    launch_time: Optional[datetime] = None
    tags: list[TagSchema] = Field(default_factory=list)


class InstanceDetailSchema(InstanceSchema):
    vpc_id: Optional[str] = None
    subnet_id: Optional[str] = None
    image_id: Optional[str] = None
    key_name: Optional[str] = None
    platform: str = "linux"


class InstanceListResponse(BaseModel):
    success: bool = True
    instances: list[InstanceSchema]
    warnings: list[str] = Field(default_factory=list)


class InstanceDetailResponse(BaseModel):
    success: bool = True
    instance: InstanceDetailSchema


class ActionResponse(BaseModel):
    success: bool = True
    message: str


class HealthResponse(BaseModel):
    success: bool = True
    message: str
    timestamp: datetime
    live: bool = False
    region: Optional[str] = None


class ErrorResponse(BaseModel):
    success: bool = False
    error: str
    code: str = ""
