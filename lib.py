from pathlib import Path
from typing import List, Dict, Mapping, Optional, Sequence, Tuple, Set, Callable, Any, Iterable, Union
import sys
from time import time
from dataclasses import dataclass


from contextlib import contextmanager
@contextmanager
def timing(info: Any):
	"""
	Simple context manager measure time taken by code.
	"""
	start=time()
	try:
		yield
	finally:
		duration=time()-start
		print(f"{duration:8.3f}:", info, file=sys.stderr)

from stroke import*


@dataclass(frozen=True)
class Candidate:
	chord: str  # in skey notation, may be empty
	score: float  # in (0, 1]

CandidateSet=Tuple[Candidate, ...]

@dataclass(frozen=True)
class Chord:
	strokes: str  # formatted steno, e.g. "KAT" or "-BG/AT"
	score: float

@dataclass(frozen=True)
class WordRecord:
	"""
	Everything known about one word. Each stage fills in more fields (with dataclasses.replace).
	When failed_at is set, segments/chords/brief are never computed.
	"""
	word: str
	pronunciation: str
	failed_at: Optional[int]=None  # position in pronunciation where no phoneme matches
	segments: Optional[Tuple[CandidateSet, ...]]=None
	chords: Optional[Tuple[Chord, ...]]=None  # ranked, best first
	brief: Optional[str]=None
