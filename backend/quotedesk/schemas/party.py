"""客户Schema"""
import re
from typing import Optional, List, Any
from pydantic import AliasChoices, BaseModel, Field, field_validator
from datetime import datetime

EMAIL_PATTERN = re.compile(r"^\S+@\S+\.\S+$")


def normalize_email(v: Any) -> Optional[str]:
    """邮箱去空格转小写，空串视为未填写"""
    if v is None:
        return None
    v = str(v).strip().lower()
    if not v:
        return None
    if not EMAIL_PATTERN.match(v):
        raise ValueError("邮箱格式不正确")
    return v


class PartyBase(BaseModel):
    """客户基础字段"""
    name: str = Field(..., min_length=1, max_length=100, description="名称")
    phone: str = Field(..., min_length=1, max_length=20, description="电话")
    address: Optional[str] = Field("", description="地址")
    email: Optional[str] = Field(None, max_length=120, description="邮箱")

    @field_validator("name", "phone", "address", mode="before")
    @classmethod
    def strip_text(cls, v: Any) -> Any:
        return v.strip() if isinstance(v, str) else v

    @field_validator("email", mode="before")
    @classmethod
    def check_email(cls, v: Any) -> Optional[str]:
        return normalize_email(v)


class PartyCreate(PartyBase):
    """创建客户"""
    pass


class PartyUpdate(BaseModel):
    """更新客户（编号不可修改）"""
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    phone: Optional[str] = Field(None, min_length=1, max_length=20)
    address: Optional[str] = None
    email: Optional[str] = Field(None, max_length=120)

    @field_validator("name", "phone", "address", mode="before")
    @classmethod
    def strip_text(cls, v: Any) -> Any:
        return v.strip() if isinstance(v, str) else v

    @field_validator("email", mode="before")
    @classmethod
    def check_email(cls, v: Any) -> Optional[str]:
        return normalize_email(v)


class PartyBrief(BaseModel):
    """报价单中嵌入的客户信息"""
    id: int
    party_code: str = Field(
        ...,
        validation_alias=AliasChoices("party_code", "partyId"),
        serialization_alias="partyId",
        description="客户编号",
    )
    name: str
    phone: str
    address: Optional[str] = ""
    email: Optional[str] = None

    class Config:
        from_attributes = True


class PartyResponse(PartyBase):
    """客户响应"""
    id: int
    party_code: str = Field(
        ...,
        validation_alias=AliasChoices("party_code", "partyId"),
        serialization_alias="partyId",
        description="客户编号",
    )
    created_at: datetime
    updated_at: datetime

    # 统计字段（可选）
    quotation_count: int = 0

    class Config:
        from_attributes = True


class PartyListResponse(BaseModel):
    """客户列表响应"""
    data: List[PartyResponse]
    total: int
    page: int
    limit: int
