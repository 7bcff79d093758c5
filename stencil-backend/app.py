"""
FastAPI Backend for the tattoo stencil generator
Converts uploaded photos into line-art stencils with the local edge pipeline
"""

import asyncio
import logging
import logging.config
import traceback
from concurrent.futures import ThreadPoolExecutor
from dataclasses import replace
from typing import Dict

from fastapi import FastAPI, File, Form, HTTPException, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response

# Load configuration
from config import (
    HOST, PORT, ALLOWED_ORIGINS, MAX_IMAGE_SIZE, MAX_UPLOAD_BYTES, ALLOWED_CONTENT_TYPES,
    PROCESSING_TIMEOUT, PROCESSING_WORKERS, LOGGING_CONFIG, validate_config,
    DEFAULT_STYLE_ID, DEFAULT_DETAIL, DEFAULT_LINE_COLOR, DEFAULT_EDGE_STRENGTH,
)
from stencil.codec import decode_data_url, decode_image, encode_png, fit_within, to_data_url, validate_upload
from stencil.errors import StencilError
from stencil.pipeline import StencilProcessor, StencilRequest, StencilResult
from stencil.styles import list_styles

# Configure logging
logging.config.dictConfig(LOGGING_CONFIG)
logger = logging.getLogger(__name__)

# Validate configuration on startup
validate_config()

# Thread pool for CPU-bound stencil rendering (keeps the event loop responsive)
executor = ThreadPoolExecutor(max_workers=PROCESSING_WORKERS)
processor = StencilProcessor()

# Initialize FastAPI app
app = FastAPI(
    title="Tattoo Stencil Engine",
    description="Local line-art extraction for tattoo stencils",
    version="1.0.0"
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/")
async def root():
    """Health check endpoint"""
    return {
        "status": "running",
        "service": "Tattoo Stencil Engine",
        "version": "1.0.0"
    }


@app.get("/health")
async def health_check():
    """Detailed health check"""
    return {
        "status": "healthy",
        "max_image_size": MAX_IMAGE_SIZE,
        "max_upload_bytes": MAX_UPLOAD_BYTES,
        "processing_timeout": PROCESSING_TIMEOUT,
    }


@app.get("/styles")
async def get_styles() -> Dict:
    """List the available stencil styles"""
    return {"styles": list_styles()}


def _render_worker(request: StencilRequest) -> StencilResult:
    """
    Synchronous worker for the CPU-bound pipeline.
    Runs in the thread pool; downscales oversized input first.
    """
    fitted = replace(request, image=fit_within(request.image, *MAX_IMAGE_SIZE))
    return processor.process_image(fitted)


async def _run_pipeline(request: StencilRequest) -> StencilResult:
    """Run the pipeline off the event loop, bounded by PROCESSING_TIMEOUT"""
    loop = asyncio.get_event_loop()
    try:
        return await asyncio.wait_for(
            loop.run_in_executor(executor, _render_worker, request),
            timeout=PROCESSING_TIMEOUT
        )
    except asyncio.TimeoutError:
        logger.error(f"Stencil rendering exceeded {PROCESSING_TIMEOUT}s")
        raise HTTPException(status_code=504, detail="Processing timed out")


@app.post("/process-image")
async def process_image(request: dict) -> Dict:
    """
    Convert a data-URL image into a stencil
    Returns the stencil as a PNG data URL plus run metadata
    """
    try:
        image_data_url = request.get("imageDataUrl")
        if not image_data_url:
            raise HTTPException(status_code=400, detail="Image data URL is required")

        image = decode_data_url(image_data_url)
        logger.info(f"Received image: {image.shape[1]}x{image.shape[0]}")

        stencil_request = StencilRequest(
            image=image,
            style_id=request.get("styleId", DEFAULT_STYLE_ID),
            detail=request.get("detail", DEFAULT_DETAIL),
            line_color=request.get("lineColor", DEFAULT_LINE_COLOR),
            transparent_background=request.get("transparentBackground", False),
            edge_strength=request.get("edgeStrength", DEFAULT_EDGE_STRENGTH),
        )
        result = await _run_pipeline(stencil_request)

        return {
            "processedImageUrl": to_data_url(encode_png(result.image)),
            **result.to_dict(),
        }

    except HTTPException:
        raise
    except StencilError as e:
        logger.warning(f"Rejected stencil request: {e}")
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Error processing image: {e}")
        logger.error(traceback.format_exc())
        raise HTTPException(status_code=500, detail="Failed to process image")


@app.post("/process-image/upload")
async def process_upload(
    file: UploadFile = File(...),
    style_id: str = Form(DEFAULT_STYLE_ID),
    detail: float = Form(DEFAULT_DETAIL),
    line_color: str = Form(DEFAULT_LINE_COLOR),
    transparent_background: bool = Form(False),
    edge_strength: float = Form(DEFAULT_EDGE_STRENGTH),
) -> Response:
    """
    Convert an uploaded image file into a stencil
    Responds with the PNG bytes directly
    """
    try:
        contents = await file.read()
        validate_upload(file.content_type, len(contents), MAX_UPLOAD_BYTES, ALLOWED_CONTENT_TYPES)
        image = decode_image(contents)
        logger.info(f"Received upload {file.filename}: {image.shape[1]}x{image.shape[0]}")

        result = await _run_pipeline(StencilRequest(
            image=image,
            style_id=style_id,
            detail=detail,
            line_color=line_color,
            transparent_background=transparent_background,
            edge_strength=edge_strength,
        ))

        return Response(
            content=encode_png(result.image),
            media_type="image/png",
            headers={"X-Stencil-Style": result.style.pipeline},
        )

    except HTTPException:
        raise
    except StencilError as e:
        logger.warning(f"Rejected upload: {e}")
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Error processing upload: {e}")
        logger.error(traceback.format_exc())
        raise HTTPException(status_code=500, detail="Failed to process image")


if __name__ == "__main__":
    import uvicorn
    logger.info(f"Starting server on {HOST}:{PORT}")
    uvicorn.run(app, host=HOST, port=PORT, log_level="info")
