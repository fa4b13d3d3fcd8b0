from fastapi import APIRouter
from app.api.routes import auth, matches, players, predictions

router = APIRouter()
router.include_router(auth.router, prefix="/auth", tags=["auth"])
router.include_router(players.router, prefix="/players", tags=["players"])
router.include_router(predictions.router, prefix="/players", tags=["predictions"])
router.include_router(matches.router, prefix="/matches", tags=["matches"])
