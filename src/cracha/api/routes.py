import base64
import json
import logging
from datetime import datetime
from typing import List
from fastapi import APIRouter, File, Form, HTTPException, UploadFile
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import Response
from cracha.config.settings import ARCHIVE_NAME, DEFAULT_RADIUS_PERCENT, REPORT_HEADER_MAX_BYTES
from cracha.core.errors import ArchiveFinalizationError, InvalidRadiusError
from cracha.core.identifier import extract_employee_id
from cracha.core.instance import get_batch_processor
from cracha.core.models import InputPhoto

logger = logging.getLogger(__name__)

router = APIRouter()

RESPONSE_FORMATS = ('zip', 'json')

@router.get("/health")
def health_check():
    """Verifica se a API está online"""
    return {
        'status': 'healthy',
        'timestamp': datetime.now().isoformat()
    }

@router.get("/employees/identifier")
def get_employee_identifier(filename: str):
    """Mostra a matrícula que seria extraída do nome do arquivo"""
    stem = InputPhoto(filename=filename, data=b'').stem
    return {
        'filename': filename,
        'identifier': extract_employee_id(stem)
    }

@router.post("/photos/process")
async def process_photos(
    photos: List[UploadFile] = File(...),
    radius_percent: int = Form(DEFAULT_RADIUS_PERCENT),
    response_format: str = Form('zip')
):
    """
    Processa as fotos enviadas.

    Com response_format=zip (padrão) devolve o ZIP com as miniaturas; o
    relatório vai no cabeçalho X-Processing-Report quando cabe em
    REPORT_HEADER_MAX_BYTES, senão o cabeçalho é omitido e
    X-Report-Truncated vale "true". Com response_format=json devolve o
    relatório completo e o ZIP em base64 no corpo.
    """
    if response_format not in RESPONSE_FORMATS:
        raise HTTPException(
            status_code=422,
            detail=f"response_format deve ser um de {', '.join(RESPONSE_FORMATS)}"
        )

    logger.info(f"API: recebidas {len(photos)} fotos (raio={radius_percent}%)")

    inputs = []
    for photo in photos:
        inputs.append(InputPhoto(filename=photo.filename or '', data=await photo.read()))

    processor = get_batch_processor()
    try:
        result = await run_in_threadpool(processor.process, inputs, radius_percent)
    except InvalidRadiusError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except ArchiveFinalizationError as e:
        logger.error(f"Erro ao gerar arquivo do lote: {str(e)}")
        raise HTTPException(status_code=500, detail=str(e))

    report = result.to_dict()

    if response_format == 'json':
        return {
            'archive_name': ARCHIVE_NAME,
            'archive': base64.b64encode(result.archive).decode('ascii'),
            'report': report
        }

    headers = {
        'Content-Disposition': f'attachment; filename="{ARCHIVE_NAME}"',
        'X-Succeeded-Count': str(report['total_succeeded']),
        'X-Failed-Count': str(report['total_failed'])
    }
    # ensure_ascii mantém o cabeçalho em latin-1
    report_header = json.dumps(report, ensure_ascii=True)
    if len(report_header) <= REPORT_HEADER_MAX_BYTES:
        headers['X-Processing-Report'] = report_header
    else:
        logger.warning(
            f"Relatório com {len(report_header)} bytes não cabe no cabeçalho; "
            f"use response_format=json para recebê-lo"
        )
        headers['X-Report-Truncated'] = 'true'
    return Response(content=result.archive, media_type='application/zip', headers=headers)
