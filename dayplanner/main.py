from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from dayplanner.routers import planner, plans, points, generate
from dayplanner.config import settings, cloud_config

# Initialize FastAPI app
app = FastAPI(
    title="Day Planner API",
    version="0.1.0",
    description="Assign saved places to trip days and generate a plan for each day"
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins if not cloud_config.IS_CLOUD_RUN else ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(planner.router, prefix="/api/v1")
app.include_router(plans.router, prefix="/api/v1")
app.include_router(points.router, prefix="/api/v1")
app.include_router(generate.router, prefix="/api/v1")

@app.get("/health")
def health_check():
    """Health check endpoint for Cloud Run and monitoring"""
    return {
        "status": "ok",
        "message": "Day Planner API is running",
        "environment": "cloud-run" if cloud_config.IS_CLOUD_RUN else "local",
        "project_id": cloud_config.PROJECT_ID if cloud_config.IS_CLOUD_RUN else "local"
    }

@app.get("/")
def root():
    """Root endpoint with API information"""
    return {
        "name": "Day Planner API",
        "version": "0.1.0",
        "docs_url": "/docs",
        "health_url": "/health"
    }

# For Cloud Run, the port is set via environment variable
if __name__ == "__main__":
    import uvicorn
    port = cloud_config.PORT if cloud_config.IS_CLOUD_RUN else settings.port
    uvicorn.run(app, host="0.0.0.0", port=port)
