import logging
from threading import Lock
from cracha.core.batch_processor import BatchProcessor
from cracha.core.face_detector import FaceDetector
from cracha.core.transcoder import PhotoTranscoder

logger = logging.getLogger(__name__)

# Lock para acesso à instância compartilhada pela API
_lock = Lock()

_batch_processor = None

def create_batch_processor(max_workers=None, detector=None):
    """Monta o pipeline completo: detector -> transcoder -> processador de lotes"""
    transcoder = PhotoTranscoder(detector or FaceDetector())
    if max_workers is None:
        return BatchProcessor(transcoder)
    return BatchProcessor(transcoder, max_workers=max_workers)

def set_batch_processor(instance):
    """Define o BatchProcessor usado pela API"""
    global _batch_processor
    with _lock:
        _batch_processor = instance

def get_batch_processor():
    """Retorna o BatchProcessor da API, criando o padrão na primeira chamada"""
    global _batch_processor
    with _lock:
        if _batch_processor is None:
            logger.info("Criando BatchProcessor padrão")
            _batch_processor = create_batch_processor()
        return _batch_processor
