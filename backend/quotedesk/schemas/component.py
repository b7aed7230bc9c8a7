"""配件目录Schema"""
from typing import Optional, List, Any
from pydantic import BaseModel, Field, field_validator
from datetime import datetime

from quotedesk.core.config import settings


class ComponentModelBase(BaseModel):
    """型号基础字段"""
    model: str = Field(..., min_length=1, max_length=100, description="型号")
    hsn_sac: str = Field(default=settings.DEFAULT_HSN_SAC, max_length=20, description="HSN/SAC 税则编码")
    warranty: Optional[str] = Field(None, max_length=50, description="保修")
    purchase_with_gst: float = Field(default=0, ge=0, description="进价（含税）")
    sale_with_gst: float = Field(default=0, ge=0, description="售价（含税）")

    @field_validator("model", "hsn_sac", "warranty", mode="before")
    @classmethod
    def strip_text(cls, v: Any) -> Any:
        return v.strip() if isinstance(v, str) else v


class ComponentModelCreate(ComponentModelBase):
    """创建型号"""
    pass


class ComponentModelResponse(ComponentModelBase):
    """型号响应"""
    id: int

    class Config:
        from_attributes = True


class ComponentBase(BaseModel):
    """配件基础字段"""
    category: str = Field(..., min_length=1, max_length=50, description="分类")
    brand: str = Field(..., min_length=1, max_length=50, description="品牌")

    @field_validator("category", "brand", mode="before")
    @classmethod
    def strip_text(cls, v: Any) -> Any:
        return v.strip() if isinstance(v, str) else v


class ComponentCreate(ComponentBase):
    """创建配件"""
    models: List[ComponentModelCreate] = Field(..., min_length=1, description="型号列表")


class ComponentUpdate(BaseModel):
    """更新配件"""
    category: Optional[str] = Field(None, min_length=1, max_length=50)
    brand: Optional[str] = Field(None, min_length=1, max_length=50)
    models: Optional[List[ComponentModelCreate]] = Field(
        None, min_length=1, description="型号列表（提供时会替换现有型号）"
    )

    @field_validator("category", "brand", mode="before")
    @classmethod
    def strip_text(cls, v: Any) -> Any:
        return v.strip() if isinstance(v, str) else v


class ComponentResponse(ComponentBase):
    """配件响应"""
    id: int
    models: List[ComponentModelResponse] = Field(default_factory=list, description="型号列表")
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class ComponentListResponse(BaseModel):
    """配件列表响应"""
    data: List[ComponentResponse]
    total: int
    page: int
    limit: int
