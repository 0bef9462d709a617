import logging

from fastapi import FastAPI
from appforge.api.generate import router as generate_router

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

app = FastAPI(title="AppForge Backend")
app.include_router(generate_router, prefix="/sessions")
