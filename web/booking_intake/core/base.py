from abc import ABC, abstractmethod
from typing import Optional, Any, Dict


class IRepository(ABC):
    """Base repository interface following Interface Segregation Principle"""

    @abstractmethod
    async def get(self, id: Any) -> Optional[Dict[str, Any]]:
        """Get entity by ID"""
        pass

    @abstractmethod
    async def create(self, *, obj_in: Dict[str, Any]) -> Dict[str, Any]:
        """Create new entity"""
        pass


class IService(ABC):
    """Base service interface"""
    pass


class BaseService(IService):
    """Base service implementation with common dependencies"""

    def __init__(self, repository: IRepository):
        self.repository = repository
