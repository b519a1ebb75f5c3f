"""
Parser-specific data models

Type-safe structures for preprocessing and directive syntax scanning.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional


@dataclass
class ProtectedSource:
    """
    Result of lifting fenced code blocks out of the source text

    Returned by TextPreprocessor.codeblocks_protect() so that directive
    and callout rewriting never touches code samples.

    Attributes:
        text: Source with every ``` span replaced by a placeholder
              (e.g., "Intro\\n\\x00CODE_BLOCK_0\\x00\\nOutro")
        blocks: Original fence text, indexed to match placeholders
                (CODE_BLOCK_0 → blocks[0])
    """
    text: str
    blocks: List[str] = field(default_factory=list)


@dataclass
class DirectiveHead:
    """
    Result of scanning a directive head: name, label and attributes

    Returned by syntax.directiveHead_parse() for all three directive forms.

    Attributes:
        name: Directive name (e.g., "bootstrap_alert", "ai-context")
        label: Text inside [...] or None when absent
        attributes: Parsed {...} attribute bag (empty when absent)
        end: Position in the scanned string just past the head
        label_start: Position of the first label character
        label_end: Position of the closing ]

    Example:
        For ':ai{prompt="Hi"} rest' scanned from position 1:
        DirectiveHead(name="ai", label=None, attributes={"prompt": "Hi"}, end=16)
    """
    name: str
    label: Optional[str] = None
    attributes: Dict[str, str] = field(default_factory=dict)
    end: int = 0
    label_start: int = -1
    label_end: int = -1

    @property
    def has_label(self) -> bool:
        return self.label is not None
