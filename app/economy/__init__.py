from app.economy.raindrops import RaindropService

__all__ = ["RaindropService"]
