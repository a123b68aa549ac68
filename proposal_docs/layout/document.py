from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import ClassVar, Optional, Tuple, Union


@dataclass(frozen=True)
class TextBlock:
    kind: ClassVar[str] = "text"

    role: str
    lines: Tuple[str, ...]
    title: Optional[str] = None

    def to_dict(self) -> dict:
        return {"kind": self.kind, **asdict(self)}


@dataclass(frozen=True)
class TableBlock:
    kind: ClassVar[str] = "table"

    title: str
    columns: Tuple[str, ...]
    rows: Tuple[Tuple[str, ...], ...]

    def to_dict(self) -> dict:
        return {"kind": self.kind, **asdict(self)}


@dataclass(frozen=True)
class ServiceRow:
    name: str
    fee: str
    scope: Optional[str] = None
    billing_cycle: Optional[str] = None


@dataclass(frozen=True)
class ServicePageBlock:
    kind: ClassVar[str] = "service_page"

    number: int
    header: Tuple[str, str]
    side_title: str
    rows: Tuple[ServiceRow, ...]

    def to_dict(self) -> dict:
        return {"kind": self.kind, **asdict(self)}


@dataclass(frozen=True)
class PageBreak:
    kind: ClassVar[str] = "page_break"

    def to_dict(self) -> dict:
        return {"kind": self.kind}


Block = Union[TextBlock, TableBlock, ServicePageBlock, PageBreak]


@dataclass(frozen=True)
class DocumentTree:
    variant: str
    blocks: Tuple[Block, ...]

    @property
    def page_count(self) -> int:
        return 1 + sum(1 for block in self.blocks if isinstance(block, PageBreak))

    def to_dict(self) -> dict:
        return {
            "variant": self.variant,
            "page_count": self.page_count,
            "blocks": [block.to_dict() for block in self.blocks],
        }
