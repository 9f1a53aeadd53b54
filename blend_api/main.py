from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from blend_api import config
from blend_api.routers.blend_images import router as blend_router


def create_app() -> FastAPI:
	config.configure_logging()
	app = FastAPI(title="Exposure Blender API", version="0.1.0")

	# CORS (set BLEND_CORS_ORIGINS in production)
	app.add_middleware(
		CORSMiddleware,
		allow_origins=config.CORS_ORIGINS,
		allow_credentials=False,
		allow_methods=["*"],
		allow_headers=["*"],
	)

	# Routers
	app.include_router(blend_router)

	return app


app = create_app()


if __name__ == "__main__":
	# Local dev server: uvicorn blend_api.main:app --reload
	import uvicorn

	uvicorn.run("blend_api.main:app", host="0.0.0.0", port=8000, reload=True)
