"""Pydantic request/response models for sequence optimization endpoints."""

from __future__ import annotations

from typing import Dict, List, Optional, Union

from pydantic import BaseModel, Field, field_validator


class OrderModel(BaseModel):
    id: str = Field(..., description="Order identifier, unique within a run.")
    values: Dict[str, Optional[Union[str, int, float]]] = Field(
        default_factory=dict, description="Attribute column -> value."
    )

    @field_validator("id")
    @classmethod
    def strip_id(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            raise ValueError("Order id must not be blank")
        return stripped


class AttributeConfigModel(BaseModel):
    column: str
    changeover_time: float = Field(..., description="Minutes charged when this attribute changes.")
    parallel_group: Optional[str] = Field(
        default=None, description="Attributes sharing a group are changed over concurrently."
    )


class MatrixEntryModel(BaseModel):
    attribute: str
    from_value: str
    to_value: str
    minutes: float
    source: str = "manual"
    notes: Optional[str] = None


class OptimizationRequest(BaseModel):
    orders: List[OrderModel]
    attributes: List[AttributeConfigModel]
    use_matrix_lookup: Optional[bool] = Field(
        default=None, description="Consult the changeover matrix. Defaults to the server setting."
    )
    matrix_entries: Optional[List[MatrixEntryModel]] = Field(
        default=None,
        description="Inline matrix entries. When omitted and lookup is on, the stored matrix is used.",
    )
    max_passes: Optional[int] = Field(default=None, ge=0, description="Override for the refinement pass cap.")
    persist: bool = Field(default=False, description="Record the run in the output history.")
    requested_by: Optional[str] = Field(default=None, description="Person or system requesting the run.")
    run_label: Optional[str] = Field(default=None, description="Friendly name for persisted outputs.")

    @field_validator("attributes")
    @classmethod
    def validate_unique_columns(cls, value: List[AttributeConfigModel]) -> List[AttributeConfigModel]:
        seen: set[str] = set()
        for attribute in value:
            if attribute.column in seen:
                raise ValueError(f"Duplicate attribute column '{attribute.column}'")
            seen.add(attribute.column)
        return value

    @field_validator("orders")
    @classmethod
    def validate_unique_ids(cls, value: List[OrderModel]) -> List[OrderModel]:
        seen: set[str] = set()
        for order in value:
            if order.id in seen:
                raise ValueError(f"Duplicate order id '{order.id}'")
            seen.add(order.id)
        return value


class OptimizedOrderModel(BaseModel):
    id: str
    original_index: int
    sequence_number: int
    values: Dict[str, str]
    work_time: float
    downtime: float
    changeover_reasons: List[str]


class AttributeStatModel(BaseModel):
    column: str
    changeover_count: int
    total_time: float
    parallel_group: str


class OptimizationResponse(BaseModel):
    sequence: List[OptimizedOrderModel]
    total_before: float
    total_after: float
    savings: float
    savings_percent: float
    total_downtime_before: float
    total_downtime_after: float
    downtime_savings: float
    downtime_savings_percent: float
    attribute_stats: List[AttributeStatModel]
    metadata: dict = Field(default_factory=dict)


class MatrixPrefetchRequest(BaseModel):
    attribute_names: List[str]
    values_by_attribute: Dict[str, List[str]]


class MatrixPrefetchResponse(BaseModel):
    entries: List[MatrixEntryModel]
