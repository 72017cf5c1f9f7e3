import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from cracha.api.routes import router
from cracha.config.logging_config import setup_logging
from cracha.config.settings import API_HOST, API_PORT
import uvicorn

logger = logging.getLogger(__name__)

def create_app() -> FastAPI:
    """Cria aplicação FastAPI com as rotas do pipeline"""
    app = FastAPI(title="Cracha API")

    # Configurar CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Processing-Report", "X-Report-Truncated", "X-Succeeded-Count", "X-Failed-Count"],
    )

    app.include_router(router)
    for route in router.routes:
        logger.debug(f"Rota registrada: {route.path}")

    return app

def start_api_server(host=API_HOST, port=API_PORT):
    """Inicia servidor API"""
    setup_logging()
    logger.info(f"Iniciando servidor API em {host}:{port}")
    uvicorn.run(create_app(), host=host, port=port)
