"""
Entity: Analysis Outcome

Resultado normalizado da extração de campos de um documento
(campos + confiança média). Produzido pelo analisador externo.
"""

import math
from dataclasses import dataclass, field


@dataclass
class ExtractedField:
    """Campo individual devolvido pelo serviço de extração."""
    name: str                     # ex: "documentNumber", "fullName"
    value: str
    confidence: float             # 0.0 a 1.0


@dataclass
class AnalysisOutcome:
    """Resultado consolidado de uma análise de documento."""
    success: bool
    extracted_fields: dict[str, str] = field(default_factory=dict)
    confidence: float = 0.0       # média simples das confianças por campo
    raw_summary: str = ""
    model_id: str = ""
    error_message: str | None = None

    @classmethod
    def failed(cls, error_message: str, model_id: str = "") -> "AnalysisOutcome":
        return cls(success=False, error_message=error_message, model_id=model_id)

    @classmethod
    def from_fields(cls, fields: list[ExtractedField], raw_summary: str = "", model_id: str = "") -> "AnalysisOutcome":
        """Build a successful outcome; zero fields means confidence 0.0."""
        # NaN/inf contam como ilegível (0.0)
        confidences = [
            min(max(f.confidence, 0.0), 1.0) if math.isfinite(f.confidence) else 0.0
            for f in fields
        ]
        avg_conf = sum(confidences) / len(confidences) if confidences else 0.0
        return cls(
            success=True,
            extracted_fields={f.name: f.value for f in fields},
            confidence=round(avg_conf, 4),
            raw_summary=raw_summary,
            model_id=model_id,
        )
