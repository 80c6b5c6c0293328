"""Storage for completed rule generations."""

from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Optional

from siemgen.models import RuleGeneration, RuleGenerationCreate


class RuleStorage(ABC):
    """Keyed store of rule generations."""

    @abstractmethod
    async def create_rule_generation(self, record: RuleGenerationCreate) -> RuleGeneration:
        pass

    @abstractmethod
    async def get_rule_generation(self, rule_generation_id: int) -> Optional[RuleGeneration]:
        pass

    @abstractmethod
    async def list_rule_generations(self) -> list[RuleGeneration]:
        pass


class MemStorage(RuleStorage):
    """In-memory storage; contents live as long as the process."""

    def __init__(self):
        self._rule_generations: dict[int, RuleGeneration] = {}
        self._next_id = 1

    async def create_rule_generation(self, record: RuleGenerationCreate) -> RuleGeneration:
        rule_generation = RuleGeneration(
            **record.model_dump(),
            id=self._next_id,
            created_at=datetime.now(timezone.utc),
        )
        self._rule_generations[rule_generation.id] = rule_generation
        self._next_id += 1
        return rule_generation

    async def get_rule_generation(self, rule_generation_id: int) -> Optional[RuleGeneration]:
        return self._rule_generations.get(rule_generation_id)

    async def list_rule_generations(self) -> list[RuleGeneration]:
        return list(self._rule_generations.values())
