from app.economy.raindrops.service import RaindropService

__all__ = ["RaindropService"]
