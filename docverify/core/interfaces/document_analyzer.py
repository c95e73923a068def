"""
Contract: Document Analyzer

Envia um documento armazenado para um serviço externo de extração
de campos (OCR) e normaliza a resposta em um mapa de campos com
confiança. Qualquer backend (Gemini, Textract, Document Intelligence)
deve implementar este contrato.
"""

from abc import ABC, abstractmethod

from docverify.core.entities.analysis_result import AnalysisOutcome
from docverify.core.entities.document import DocumentType
from docverify.core.result import Result

GENERIC_MODEL_ID = "prebuilt-document"

# DocumentType -> identificador do modelo/perfil de análise
ANALYSIS_MODELS: dict[DocumentType, str] = {
    DocumentType.IDENTITY_DOCUMENT: "prebuilt-idDocument",
    DocumentType.PROOF_OF_RESIDENCE: "prebuilt-layout",
    DocumentType.CRIMINAL_RECORD: "prebuilt-read",
}


def select_model(document_type: DocumentType | str | None) -> str:
    """Unknown types fall back to the generic model."""
    if not isinstance(document_type, DocumentType):
        document_type = DocumentType.parse(document_type)
    return ANALYSIS_MODELS.get(document_type, GENERIC_MODEL_ID)


class IDocumentAnalyzer(ABC):
    """
    Port: Document Analyzer

    Falhas do serviço remoto voltam como AnalysisOutcome(success=False),
    nunca como exceção. Result falha apenas para argumentos inválidos.
    """

    @abstractmethod
    async def analyze(self, document_url: str, document_type: DocumentType | str) -> Result[AnalysisOutcome]:
        """
        Extrai campos de um documento.

        Args:
            document_url: URL de leitura (download grant) do objeto.
            document_type: Tipo do documento; escolhe o modelo de análise.

        Returns:
            Result com AnalysisOutcome (campos, confiança média, resumo).
        """
        ...
