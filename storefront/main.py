import logging
from fastapi import FastAPI
from storefront.api.router import api_router

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

app = FastAPI(title="Storefront Personalization Service")

app.include_router(api_router)


@app.get("/")
def root():
    return {"status": "running", "message": "Storefront Personalization Service"}
