from pydantic import BaseModel
from typing import List, Dict, Any, Literal

ReportFormat = Literal["json", "csv"]

class ReportOut(BaseModel):
    data: List[Dict[str, Any]]
    summary: Dict[str, Any]
    generated_at: str
