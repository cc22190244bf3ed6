"""Snapshot returned by the overview endpoint and pushed on the stream."""
import json
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Union

Number = Union[int, float]


@dataclass(frozen=True)
class ScaleStat:
    avg: Optional[float] = None
    min: Optional[Number] = None
    max: Optional[Number] = None


@dataclass(frozen=True)
class Snapshot:
    """One full aggregation of the response table.

    Built once per recompute and replaced wholesale by the next one.
    """
    total_responses: int
    single_choice: Dict[str, List[Dict[str, Any]]]
    scales: Dict[str, ScaleStat]
    multi_choice: Dict[str, Dict[str, int]]
    daily_counts: List[Dict[str, Any]]
    generated_at: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalResponses": self.total_responses,
            "singleChoice": {col: [dict(e) for e in entries] for col, entries in self.single_choice.items()},
            "scales": {
                col: {"avg": s.avg, "min": s.min, "max": s.max}
                for col, s in self.scales.items()
            },
            "multiChoice": {col: dict(tally) for col, tally in self.multi_choice.items()},
            "dailyCounts": [dict(d) for d in self.daily_counts],
            "generatedAt": self.generated_at,
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False)
