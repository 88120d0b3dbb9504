import asyncio
import subprocess

from lib import*
from stream import Stage, Emit

default_espeak_command: Tuple[str, ...]=("espeak", "-q", "--ipa", "-v", "en-us")  # words are read from stdin

punctuation_table={ord(c): None for c in ",.;!?…"}

class TranscriptionError(RuntimeError):
	pass

class EspeakTranscriber:
	"""
	Run espeak once per batch. The output must have exactly one line per word, in the same order;
	anything else fails the whole batch, there is no way to tell which line belongs to which word.
	"""
	def __init__(self, command: Sequence[str]=default_espeak_command)->None:
		self.command=[*command]

	def transcribe(self, words: Sequence[str])->List[str]:
		input_text="\n".join(words).translate(punctuation_table)
		try:
			process=subprocess.run(self.command, input=input_text.encode("u8"),
					stdout=subprocess.PIPE, stderr=subprocess.PIPE)
		except OSError as e:
			raise TranscriptionError(f"cannot run {self.command[0]}: {e}") from e

		output=process.stdout.decode("u8")
		if process.returncode!=0:
			raise TranscriptionError(f"{self.command[0]} exit code {process.returncode} message: "
					f"{process.stderr.decode('u8', errors='replace')}")
		pronunciations=output.strip().split("\n") if output.strip() else []
		if len(pronunciations)!=len(words):
			raise TranscriptionError(f"{self.command[0]} returned {len(pronunciations)} pronunciations "
					f"for {len(words)} words. input: {input_text!r}, output: {output!r}")
		return [x.strip() for x in pronunciations]

class TranscribeStage(Stage):
	"""
	Batch of words in, one WordRecord per word out.
	"""
	def __init__(self, transcriber: Any)->None:
		self.transcriber=transcriber  # anything with transcribe(words)->List[str]

	async def process(self, words: List[str], emit: Emit)->None:
		pronunciations=await asyncio.to_thread(self.transcriber.transcribe, words)
		if len(pronunciations)!=len(words):
			raise TranscriptionError(f"got {len(pronunciations)} pronunciations for {len(words)} words: {words!r}")
		for word, pronunciation in zip(words, pronunciations):
			await emit(WordRecord(word, pronunciation))
