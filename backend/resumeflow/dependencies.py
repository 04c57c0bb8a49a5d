"""Global FastAPI dependencies.

The DocumentPipeline is created in the application lifespan and kept on
app.state; routers reach it through get_pipeline.
"""

from fastapi import HTTPException, Request, status

from .pipeline import DocumentPipeline


def get_pipeline(request: Request) -> DocumentPipeline:
    """Return the running document pipeline.

    Raises:
        HTTPException 503: If the application has not finished starting

    Example:
        @router.get("/documents")
        async def list_documents(pipeline: DocumentPipeline = Depends(get_pipeline)):
            return await pipeline.list_documents()
    """
    pipeline = getattr(request.app.state, "pipeline", None)
    if pipeline is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Document pipeline is not available",
        )
    return pipeline
