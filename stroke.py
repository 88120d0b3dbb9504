from typing import List, Dict, Mapping, Optional, Sequence, Tuple, Set, Callable, Any, Iterable, Union
from plover_stroke import BaseStroke  # type: ignore


class Stroke(BaseStroke):
	pass


implicit_hyphen_keys=('A-', 'O-', '5-', '0-', '-E', '-U', '*')

Stroke.setup(

keys = (
    '#',
    'S-', 'T-', 'K-', 'P-', 'W-', 'H-', 'R-',
    'A-', 'O-',
    '*',
    '-E', '-U',
    '-F', '-R', '-P', '-B', '-L', '-G', '-T', '-S', '-D', '-Z',
),

implicit_hyphen_keys = implicit_hyphen_keys,

number_key = '#',

numbers = {
    'S-': '1-',
    'T-': '2-',
    'P-': '3-',
    'H-': '4-',
    'A-': '5-',
    'O-': '0-',
    '-F': '-6',
    '-P': '-7',
    '-L': '-8',
    '-T': '-9',
}
		)

separator="/"

# position of a key is its index in Stroke.KEYS. Keys up to -U are the left hand and the vowels,
# the rest are right hand consonants.
vowel_boundary: int=Stroke.KEYS.index("-U")
first_vowel_position: int=Stroke.KEYS.index("A-")

# skey: one character per key. Left hand and vowels are written without the hyphen,
# right hand consonants in lower case (so -T and T- are different).
# idea from spectra lexer.
key_to_skey: Dict[str, str]={
		key: (
			key[1].lower() if i>vowel_boundary else
			key.strip("-")
			)
		for i, key in enumerate(Stroke.KEYS)}
for x in key_to_skey.values(): assert len(x)==1 and x!=separator, x
assert len({*key_to_skey.values()})==len(Stroke.KEYS)

key_position: Mapping[str, int]={
		skey: Stroke.KEYS.index(key) for key, skey in key_to_skey.items()
		}

def to_skeys(strokes: str)->str:
	"""
	Convert steno such as "TKPW/-BG" to skey notation ("TKPW/bg").
	"""
	return separator.join(
			"".join(map(key_to_skey.__getitem__, Stroke(stroke).keys()))
			for stroke in strokes.split(separator)
			)
