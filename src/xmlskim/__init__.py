from .attributes import Attributes
from .dispatcher import STOP, HandlerTable, Registration, SkimOpts
from .encoding import decode_xml
from .errors import MarkupSyntaxError, SelectorSyntaxError, SkimError, StructureError
from .matcher import SelectorMatcher, matches
from .node import Node
from .selector import CHILD, DESCENDANT, AttributePredicate, CompoundSelector, SelectorChain, compile_selector
from .skimmer import ScanStats, Skimmer, select, skim
from .tokenizer import Tokenizer, TokenizerOpts, tokenize
from .walker import NodeClosed, NodeOpened, TreeWalker, walk

__all__ = [
    "CHILD",
    "DESCENDANT",
    "STOP",
    "AttributePredicate",
    "Attributes",
    "CompoundSelector",
    "HandlerTable",
    "MarkupSyntaxError",
    "Node",
    "NodeClosed",
    "NodeOpened",
    "Registration",
    "ScanStats",
    "SelectorChain",
    "SelectorMatcher",
    "SelectorSyntaxError",
    "SkimError",
    "SkimOpts",
    "Skimmer",
    "StructureError",
    "Tokenizer",
    "TokenizerOpts",
    "TreeWalker",
    "compile_selector",
    "decode_xml",
    "matches",
    "select",
    "skim",
    "tokenize",
    "walk",
]
