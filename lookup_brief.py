#!/bin/python3
"""
Show how words are split into phonemes and which briefs are generated for them.
"""

import argparse
import shlex

from lib import*
from lib_steno import split_phonemes, format_chord, segment_record, synthesize_record, default_max_combinations
from lib_espeak import EspeakTranscriber, default_espeak_command
from phoneme_map import phoneme_map

def get_segmentation(pronunciation: str, color: bool=True)->Tuple[str, str]:
	"""
	Get a visual (ASCII table) representation of how a pronunciation is split into phonemes.
	The first row is the phonemes, the second row the candidate chords of each phoneme.
	The part that cannot be matched is appended to the first row (in red if color is True).
	"""
	phonemes, failed_at=split_phonemes(pronunciation)
	phonemes_=""
	chords_=""
	for phoneme in phonemes:
		a=phoneme
		b=",".join(format_chord(x.chord) or "-" for x in phoneme_map.entries[phoneme])
		l=max(len(a), len(b))
		phonemes_+=a.ljust(l)+"|"
		chords_+=b.ljust(l)+"|"
	if failed_at is not None:
		rest=pronunciation[failed_at:]
		if color:
			from colorama import Fore  # type: ignore
			rest=Fore.RED+rest+Fore.RESET
		phonemes_+=rest
	return phonemes_, chords_

def describe(record: WordRecord, count: int=5, color: bool=True)->List[str]:
	phonemes_, chords_=get_segmentation(record.pronunciation, color)
	lines=[
			f"{record.word}  /{record.pronunciation}/",
			"== "+phonemes_,
			"== "+chords_,
			]
	if record.failed_at is not None:
		lines.append(f"no phoneme matches at position {record.failed_at}")
	elif not record.chords:
		lines.append("no brief")
	else:
		lines.extend(f"{chord.score:8.3f}  {chord.strokes}" for chord in record.chords[:count])
	return lines

def main(argv: Optional[Sequence[str]]=None)->int:
	parser=argparse.ArgumentParser(
			usage="Show the phonemes and the ranked briefs of words.",
			formatter_class=argparse.ArgumentDefaultsHelpFormatter)
	parser.add_argument("words", nargs="+",
			help="Words to look up.")
	parser.add_argument("-p", "--pronunciation", action="store_true",
			help="The arguments are IPA pronunciations instead of words (espeak is not run).")
	parser.add_argument("-n", "--count", type=int, default=5,
			help="Number of briefs to show for each word.")
	parser.add_argument("--no-color", action="store_true",
			help="Do not highlight the unmatched part of a pronunciation.")
	parser.add_argument("--max-combinations", type=int, default=default_max_combinations,
			help="Words with more chord combinations than this get no brief.")
	parser.add_argument("--espeak", default=shlex.join(default_espeak_command),
			help="Command that reads one word per line and prints one IPA pronunciation per line.")
	args=parser.parse_args(argv)

	words: List[str]=[*dict.fromkeys(args.words)]
	if args.pronunciation:
		pronunciations=words
	else:
		pronunciations=EspeakTranscriber(shlex.split(args.espeak)).transcribe(words)

	for word, pronunciation in zip(words, pronunciations):
		record=synthesize_record(segment_record(WordRecord(word, pronunciation)), args.max_combinations)
		for line in describe(record, args.count, not args.no_color):
			print(line)
		print()
	return 0

if __name__=="__main__":
	sys.exit(main())
