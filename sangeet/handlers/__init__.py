from aiogram import Router

from sangeet.handlers import library, upload

router = Router()
router.include_router(library.router)
router.include_router(upload.router)

__all__ = ["router"]
