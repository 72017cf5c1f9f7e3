import gc
import logging
import time
from concurrent.futures import ThreadPoolExecutor
from threading import Event, Lock
from typing import Iterable, List, NamedTuple, Optional
from cracha.config.settings import (
    ALLOWED_EXTENSIONS,
    BATCH_MAX_WORKERS,
    MAX_PHOTO_BYTES,
    OUTPUT_EXTENSION
)
from cracha.core.archive import ZipArchiveWriter
from cracha.core.errors import (
    ArchiveFinalizationError,
    BatchCancelledError,
    DuplicateIdentifierError,
    PhotoProcessingError
)
from cracha.core.identifier import extract_employee_id
from cracha.core.models import BatchResult, InputPhoto, PhotoFailure, PhotoSuccess, ProcessedPhoto
from cracha.utils.validators import validate_photo, validate_radius

logger = logging.getLogger(__name__)


class PhotoOutcome(NamedTuple):
    photo: InputPhoto
    identifier: Optional[str]
    processed: Optional[ProcessedPhoto]
    error: Optional[Exception]


class BatchProcessor:
    """
    Processa um lote de fotos em paralelo (número limitado de threads) e
    gera um único ZIP com as miniaturas mais o relatório de sucessos/falhas.

    A falha de uma foto nunca interrompe o lote; apenas a falha ao gerar o
    arquivo compactado (ArchiveFinalizationError) é propagada.
    """

    def __init__(self, transcoder, max_workers=BATCH_MAX_WORKERS, archive_factory=ZipArchiveWriter,
                 allowed_extensions=ALLOWED_EXTENSIONS, max_photo_bytes=MAX_PHOTO_BYTES):
        self.transcoder = transcoder
        self.max_workers = max(1, max_workers)
        self.archive_factory = archive_factory
        self.allowed_extensions = allowed_extensions
        self.max_photo_bytes = max_photo_bytes
        # Um Event por chamada de process(); stop() sinaliza todos os lotes ativos
        self._active_stops = set()
        self._stops_lock = Lock()
        logger.info(f"BatchProcessor inicializado com {self.max_workers} workers para processamento paralelo")

    def process(self, photos: Iterable, radius_percent, stop_event: Optional[Event] = None) -> BatchResult:
        """
        Processa o lote completo.

        Args:
            photos: InputPhoto ou pares (nome_do_arquivo, bytes)
            radius_percent: Raio adaptativo, inteiro entre 5 e 100
            stop_event: Event para cancelar apenas este lote (opcional)
        Returns:
            BatchResult com o ZIP e o relatório
        Raises:
            InvalidRadiusError: raio fora do intervalo
            ArchiveFinalizationError: não foi possível gerar o ZIP
        """
        validate_radius(radius_percent)
        photos = [self._as_input_photo(photo) for photo in photos]
        stop_event = stop_event or Event()

        logger.info(f"Iniciando lote com {len(photos)} fotos (raio={radius_percent}%)")
        start_time = time.time()

        with self._stops_lock:
            self._active_stops.add(stop_event)
        try:
            with ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix='batch') as executor:
                futures = [
                    executor.submit(self._process_photo, photo, radius_percent, stop_event)
                    for photo in photos
                ]
                # Resultados na ordem de entrada, independente da ordem de conclusão
                outcomes = [future.result() for future in futures]
        finally:
            with self._stops_lock:
                self._active_stops.discard(stop_event)

        succeeded, failed, staged = self._stage(outcomes)
        archive = self._build_archive(staged)

        result = BatchResult(
            archive=archive,
            succeeded=tuple(succeeded),
            failed=tuple(failed),
            processing_time=time.time() - start_time
        )

        logger.info(f"Lote finalizado em {result.processing_time:.2f}s:")
        logger.info(f"- Total de fotos: {result.total_photos}")
        logger.info(f"- Processadas: {len(result.succeeded)}")
        logger.info(f"- Com falha: {len(result.failed)}")

        del outcomes, staged
        gc.collect()  # Liberar imagens decodificadas

        return result

    def stop(self):
        """
        Interrompe o agendamento de novas fotos em todos os lotes ativos; as
        em andamento terminam. Para cancelar um único lote, passe stop_event
        para process() e sinalize-o diretamente.
        """
        with self._stops_lock:
            active = list(self._active_stops)
        for stop_event in active:
            stop_event.set()
        logger.info(f"Parada solicitada para {len(active)} lote(s) em andamento")

    def _process_photo(self, photo: InputPhoto, radius_percent, stop_event: Event) -> PhotoOutcome:
        """Processa uma única foto; nunca levanta exceção"""
        if stop_event.is_set():
            return PhotoOutcome(photo, None, None, BatchCancelledError("Processamento cancelado"))

        try:
            validate_photo(photo, self.allowed_extensions, self.max_photo_bytes)
            identifier = extract_employee_id(photo.stem)
            processed = self.transcoder.transcode(photo, radius_percent)
            processed.identifier = identifier
            return PhotoOutcome(photo, identifier, processed, None)

        except PhotoProcessingError as e:
            logger.warning(f"Foto {photo.filename} não processada: {str(e)}")
            return PhotoOutcome(photo, None, None, e)

        except Exception as e:
            logger.error(f"Erro ao processar foto {photo.filename}: {str(e)}", exc_info=True)
            return PhotoOutcome(photo, None, None, e)

    def _stage(self, outcomes: List[PhotoOutcome]):
        """
        Separa sucessos e falhas na ordem de entrada. Se duas fotos geram a
        mesma matrícula, a primeira vence e as demais viram falha.
        """
        succeeded = []
        failed = []
        staged = []
        seen = {}

        for outcome in outcomes:
            error = outcome.error
            if error is None:
                key = outcome.identifier.lower()
                if key in seen:
                    error = DuplicateIdentifierError(
                        f"Matrícula {outcome.identifier} já gerada a partir de {seen[key]}"
                    )
                    logger.warning(f"Foto {outcome.photo.filename} ignorada: {str(error)}")

            if error is not None:
                failed.append(PhotoFailure(
                    filename=outcome.photo.filename,
                    reason=str(error) or type(error).__name__,
                    error_type=type(error).__name__
                ))
                continue

            seen[outcome.identifier.lower()] = outcome.photo.filename
            output_name = f"{outcome.identifier}{OUTPUT_EXTENSION}"
            staged.append((output_name, outcome.processed.data))
            succeeded.append(PhotoSuccess(
                filename=output_name,
                identifier=outcome.identifier,
                original_filename=outcome.photo.filename
            ))

        return succeeded, failed, staged

    def _build_archive(self, staged) -> bytes:
        try:
            writer = self.archive_factory()
            for output_name, data in staged:
                writer.add(output_name, data)
            return writer.finalize()
        except ArchiveFinalizationError:
            logger.error("Erro ao gerar arquivo do lote")
            raise
        except Exception as e:
            logger.error(f"Erro ao gerar arquivo do lote: {str(e)}")
            raise ArchiveFinalizationError(f"Não foi possível gerar o arquivo: {str(e)}") from e

    @staticmethod
    def _as_input_photo(photo) -> InputPhoto:
        if isinstance(photo, InputPhoto):
            return photo
        filename, data = photo
        return InputPhoto(filename=filename, data=data)
