#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Padroniza fotos de funcionários: recorta a face, gera miniaturas 400x400
nomeadas pela matrícula e empacota tudo num ZIP.

Uso:
    cracha fotos/ --output processed_images.zip --radius 20 --report relatorio.json
    cracha --serve
"""

import os
import sys
import json
import logging
import argparse

from cracha.config.settings import (
    ALLOWED_EXTENSIONS,
    ARCHIVE_NAME,
    BATCH_MAX_WORKERS,
    DEFAULT_RADIUS_PERCENT
)
from cracha.core.errors import ArchiveFinalizationError, InvalidRadiusError
from cracha.core.instance import create_batch_processor
from cracha.core.models import InputPhoto
from cracha.utils.logger import setup_colored_logging

logger = logging.getLogger(__name__)

def parse_args(argv=None):
    parser = argparse.ArgumentParser(description='Padronização de fotos de funcionários')
    parser.add_argument('input_dir', nargs='?',
                        help='Diretório com as fotos originais')
    parser.add_argument('--output', type=str, default=ARCHIVE_NAME,
                        help='Caminho do ZIP gerado')
    parser.add_argument('--radius', type=int, default=DEFAULT_RADIUS_PERCENT,
                        help='Raio adaptativo em percentual do tamanho da face (5-100)')
    parser.add_argument('--workers', type=int, default=BATCH_MAX_WORKERS,
                        help='Número de threads de processamento')
    parser.add_argument('--report', type=str, default=None,
                        help='Salvar relatório do lote em JSON')
    parser.add_argument('--serve', action='store_true',
                        help='Iniciar a API em vez de processar um diretório')
    parser.add_argument('--debug', action='store_true',
                        help='Logs detalhados')
    args = parser.parse_args(argv)

    if not args.serve and not args.input_dir:
        parser.error('informe o diretório de fotos ou --serve')
    return args

def load_photos(input_dir):
    """Lê as fotos do diretório, em ordem alfabética"""
    photos = []
    for filename in sorted(os.listdir(input_dir)):
        path = os.path.join(input_dir, filename)
        if not os.path.isfile(path) or not filename.lower().endswith(ALLOWED_EXTENSIONS):
            continue
        with open(path, 'rb') as f:
            photos.append(InputPhoto(filename=filename, data=f.read()))
    return photos

def main(argv=None):
    args = parse_args(argv)
    setup_colored_logging(logging.DEBUG if args.debug else logging.INFO)

    if args.serve:
        from cracha.api.server import start_api_server
        start_api_server()
        return 0

    if not os.path.isdir(args.input_dir):
        logger.error(f"Diretório não encontrado: {args.input_dir}")
        return 2

    photos = load_photos(args.input_dir)
    if not photos:
        logger.warning(f"Nenhuma foto encontrada em {args.input_dir}")

    processor = create_batch_processor(max_workers=args.workers)

    try:
        result = processor.process(photos, args.radius)
    except InvalidRadiusError as e:
        logger.error(str(e))
        return 2
    except ArchiveFinalizationError as e:
        logger.error(f"Erro ao gerar arquivo: {str(e)}")
        return 1

    try:
        with open(args.output, 'wb') as f:
            f.write(result.archive)
    except OSError as e:
        logger.error(f"Erro ao salvar {args.output}: {str(e)}")
        return 1
    logger.info(f"Arquivo salvo em {args.output}")

    for failure in result.failed:
        logger.warning(f"- {failure.filename}: {failure.reason}")

    if args.report:
        with open(args.report, 'w', encoding='utf-8') as f:
            json.dump(result.to_dict(), f, ensure_ascii=False, indent=2)
        logger.info(f"Relatório salvo em {args.report}")

    return 0

if __name__ == "__main__":
    sys.exit(main())
