from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field


class LotOwner(BaseModel):
    first_name: str = ""
    middle_name: str = ""
    last_name: str = ""


class Farmer(BaseModel):
    first_name: str = ""
    middle_name: str = ""
    last_name: str = ""


class AccountDetail(BaseModel):
    division: str = Field(default="", description="Division label read from the ACC sheet")
    farmer: Farmer = Field(default_factory=Farmer)
    lot_no: str = Field(description="Lot number, kept as text")
    lot_owner: LotOwner = Field(default_factory=LotOwner)
    name_of_ia: str = Field(default="", description="Irrigators' association name")


class SOADetail(BaseModel):
    # formatted like "1,234.56"
    area: str = ""
    principal: str = ""
    penalty: str = ""
    old_account: str = ""
    total: str = ""


class ExtractedData(BaseModel):
    account_details: List[AccountDetail] = Field(default_factory=list)
    file_id: str = ""
    soa_details: List[SOADetail] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)


class ConsolidationSkippedDetail(BaseModel):
    file_name: str
    file_id: Optional[str] = None
    reason: str


class ConsolidationResult(BaseModel):
    output_buffer: bytes
    output_name: str
    consolidated_count: int
    skipped_details: List[ConsolidationSkippedDetail] = Field(default_factory=list)
