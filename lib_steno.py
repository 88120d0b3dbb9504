import itertools
import math
from dataclasses import replace

from lib import*
from phoneme_map import PhonemeMap, phoneme_map as default_phoneme_map

default_max_combinations=1024
repair_penalty=0.5  # score multiplier for each stroke break inserted by repair_order

@dataclass(frozen=True)
class SegmentationFailure:
	position: int  # nothing in the phoneme map matches pronunciation[position:]

def split_phonemes(pronunciation: str, phoneme_map: PhonemeMap=default_phoneme_map)->Tuple[List[str], Optional[int]]:
	"""
	Greedy longest match from the left, no backtracking.
	Return the matched phonemes, and the position where matching failed (None if the whole string matched).
	"""
	phonemes: List[str]=[]
	position=0
	while position<len(pronunciation):
		for length in range(min(phoneme_map.longest, len(pronunciation)-position), 0, -1):
			phoneme=pronunciation[position:position+length]
			if phoneme in phoneme_map.entries:
				phonemes.append(phoneme)
				position+=length
				break
		else:
			return phonemes, position
	return phonemes, None

def segment(pronunciation: str, phoneme_map: PhonemeMap=default_phoneme_map)->Union[
		Tuple[CandidateSet, ...],
		SegmentationFailure]:
	"""
	Return one candidate set per phoneme in order. A phoneme may have an empty candidate set.
	"""
	phonemes, failed_at=split_phonemes(pronunciation, phoneme_map)
	if failed_at is not None:
		return SegmentationFailure(failed_at)
	return tuple(phoneme_map.entries[phoneme] for phoneme in phonemes)

def repair_order(chord: str)->Tuple[str, int]:
	"""
	Insert a separator before every key that cannot follow the previous key in the same stroke.
	Return the repaired chord and the number of separators inserted. Empty strokes are removed.
	"""
	strokes: List[str]=[""]
	previous=0
	inserted=0
	for skey in chord:
		if skey==separator:
			strokes.append("")
			previous=0
			continue
		position=key_position[skey]
		if position<=previous:
			strokes.append("")
			inserted+=1
			previous=0
		strokes[-1]+=skey
		previous=position
	return separator.join(stroke for stroke in strokes if stroke), inserted

def format_chord(chord: str)->str:
	"""
	Render a chord in skey notation as steno: "KAt" -> "KAT", "Kt" -> "KT", "t" -> "-T".
	Each stroke must already be in key order.
	"""
	result=""
	middle=False  # a left hand or vowel key has been written in this stroke
	for skey in chord:
		if skey==separator:
			result+=separator
			middle=False
			continue
		position=key_position[skey]
		if position>vowel_boundary:
			if not middle:
				result+="-"
				middle=True
			result+=skey.upper()
		else:
			middle=True
			result+=skey
	return result

def synthesize(
		candidate_sets: Sequence[CandidateSet],
		max_combinations: int=default_max_combinations,
		penalty: float=repair_penalty,
		)->List[Chord]:
	"""
	Try every combination of candidates, best first.
	Return an empty list if there are more than max_combinations combinations.
	"""
	sets=[x for x in candidate_sets if x]  # an empty set contributes nothing
	if math.prod(len(x) for x in sets)>max_combinations:
		return []

	chords: List[Chord]=[]
	for combination in itertools.product(*sets):
		repaired, inserted=repair_order("".join(x.chord for x in combination))
		if not repaired: continue
		score=math.prod((x.score for x in combination), start=1.)*penalty**inserted
		chords.append(Chord(format_chord(repaired), score))

	# sorted is stable, so equal scores keep the order of itertools.product
	best: Dict[str, Chord]={}  # remove duplicates while preserving the order
	for chord in sorted(chords, key=lambda x: -x.score):
		best.setdefault(chord.strokes, chord)
	return [*best.values()]

def segment_record(record: WordRecord, phoneme_map: PhonemeMap=default_phoneme_map)->WordRecord:
	result=segment(record.pronunciation, phoneme_map)
	if isinstance(result, SegmentationFailure):
		return replace(record, failed_at=result.position)
	return replace(record, segments=result)

def synthesize_record(record: WordRecord, max_combinations: int=default_max_combinations)->WordRecord:
	if record.failed_at is not None:
		return record
	assert record.segments is not None, record
	chords=synthesize(record.segments, max_combinations)
	return replace(record,
			chords=tuple(chords),
			brief=chords[0].strokes if chords else None)
