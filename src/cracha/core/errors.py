"""
Exceções do pipeline de padronização de fotos.

Erros derivados de PhotoProcessingError ficam restritos a uma foto: o
BatchProcessor os converte em entradas de falha do relatório. Apenas
ArchiveFinalizationError (e InvalidRadiusError, erro do chamador) saem de
BatchProcessor.process.
"""


class PhotoProcessingError(Exception):
    """Falha local a uma única foto"""


class DecodeError(PhotoProcessingError):
    """Bytes recebidos não formam uma imagem válida"""


class EncodeError(PhotoProcessingError):
    """Falha ao codificar a miniatura de saída"""


class InvalidPhotoError(PhotoProcessingError):
    """Foto rejeitada antes da decodificação (extensão, tamanho, nome)"""


class NoFaceDetectedError(PhotoProcessingError):
    """Detector não encontrou nenhuma face"""


class OracleTimeoutError(NoFaceDetectedError):
    """Detecção de faces excedeu o tempo limite"""


class DuplicateIdentifierError(PhotoProcessingError):
    """Outra foto do lote já gerou o mesmo identificador"""


class BatchCancelledError(PhotoProcessingError):
    """Lote interrompido antes desta foto começar"""


class ArchiveFinalizationError(Exception):
    """Não foi possível gerar o arquivo compactado do lote"""


class InvalidRadiusError(ValueError):
    """Percentual de raio fora do intervalo aceito"""
