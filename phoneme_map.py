"""
Static table from espeak's IPA output (en-us voice) to steno chord candidates.

Each line is `phoneme | candidates`. A candidate is written in steno (parsed by Stroke),
optionally followed by `:score` (default 1). `-` is a candidate with no keys,
`/` is a stroke separator. A phoneme with nothing after `|` is matched but produces nothing.
"""

from types import MappingProxyType
from lib import*

phoneme_table: List[str]=[
# stress and length marks
"ˈ       |",
"ˌ       |",
"ː       |",
"ʔ       |",
"\u0329  |",  # syllabic mark (combining)

# consonant | left    right
"b       | PW        -B         ",
"d       | TK        -D         ",
"dʒ      | SKWR      -PBLG      ",
"f       | TP        -F         ",
"ɡ       | TKPW      -G         ",
"g       | TKPW      -G         ",
"h       | H                    ",
"j       | KWR                  ",
"k       | K         -BG        ",
"l       | HR        -L         ",
"ɫ       | HR        -L         ",
"m       | PH        -PL        ",
"n       | TPH       -PB        ",
"ŋ       | -PBG                 ",
"p       | P         -P         ",
"ɹ       | R         -R         ",
"r       | R         -R         ",
"s       | S         -S         ",
"ʃ       | SH        -RB        ",
"ʒ       | SH        -RB        ",
"t       | T         -T         ",
"ɾ       | T         -T        TK:0.8  -D:0.8",  # flap: butter, city
"tʃ      | KH        -FP        ",
"θ       | TH        *T         ",
"ð       | TH        *T         ",
"v       | SR        -F         ",
"w       | W                    ",
"z       | S:0.9     -Z        -S:0.9",
"x       | K:0.8     -BG:0.8    ",
"n\u0329 | -PB       TPH:0.8    ",
"l\u0329 | -L        HR:0.8     ",

# consonant clusters that have their own chord
"ŋk      | *PBG      -PBG:0.9   ",
"ŋɡ      | -PBG                 ",
"mp      | -FRP                 ",
"st      | ST        *S        -FT:0.9",
"ks      | -BGS                 ",
"ʃən     | -GS                  ",
"kʃən    | -BGS                 ",
"ntʃ     | -FRPB                ",

# vowel
"æ       | A                    ",
"a       | A                    ",
"aɪ      | AOEU                 ",
"aɪɚ     | AOEUR                ",
"aʊ      | OU                   ",
"aʊɚ     | OUR                  ",
"ɑ       | O         A:0.8      ",
"ɑː      | O         A:0.8      ",
"ɑːɹ     | AR                   ",
"ɒ       | O                    ",
"ɔ       | AU        O:0.8      ",
"ɔː      | AU        O:0.8      ",
"ɔːɹ     | OR                   ",
"o       | O                    ",
"oː      | OE                   ",
"oːɹ     | OR                   ",
"oʊ      | OE                   ",
"əʊ      | OE                   ",
"ɔɪ      | OEU                  ",
"ɛ       | E                    ",
"e       | E                    ",
"eɪ      | AEU                  ",
"ɛɹ      | AEUR      ER:0.8     ",
"ɪ       | EU        E:0.8      ",
"ɪɹ      | AOER      EUR:0.8    ",
"i       | AOE       EU:0.8     ",
"iː      | AOE                  ",
"ʊ       | U                    ",
"ʊɹ      | AOUR      UR:0.8     ",
"u       | AOU                  ",
"uː      | AOU                  ",
"ju      | AOU                  ",
"juː     | AOU                  ",
"ʌ       | U                    ",
"ɜ       | UR        EUR:0.8    ",
"ɜː      | UR        EUR:0.8    ",
"ɝ       | UR                   ",
"ɚ       | ER        -R:0.8     ",

# unstressed vowels may be dropped
"ə       | U         -:0.6      ",
"ɐ       | U         A:0.8     -:0.6",
"ᵻ       | EU        -:0.6      ",
]

@dataclass(frozen=True)
class PhonemeMap:
	entries: Mapping[str, CandidateSet]  # read-only
	longest: int  # length of the longest phoneme

def parse_candidate(token: str)->Candidate:
	chord, _, score=token.partition(":")
	return Candidate(
			separator if chord==separator else
			"" if chord=="-" else
			to_skeys(chord),
			float(score) if score else 1.)

def build_phoneme_map(lines: Iterable[str])->PhonemeMap:
	entries: Dict[str, CandidateSet]={}
	for line in lines:
		phoneme, candidates=line.split("|")
		phoneme=phoneme.strip()
		assert phoneme, line
		assert phoneme not in entries, phoneme
		entries[phoneme]=tuple(parse_candidate(x) for x in candidates.split())
		for candidate in entries[phoneme]:
			assert 0<candidate.score<=1, (phoneme, candidate)
	entries[" "]=(Candidate(separator, 1.),)  # word boundary in multi-word titles
	return PhonemeMap(MappingProxyType(entries), max(map(len, entries)))

phoneme_map: PhonemeMap=build_phoneme_map(phoneme_table)

# every character of a phoneme is also a phoneme,
# so any string made of phonemes is segmented completely even without backtracking
for phoneme_ in phoneme_map.entries:
	for c in phoneme_:
		assert c in phoneme_map.entries, (phoneme_, c)
