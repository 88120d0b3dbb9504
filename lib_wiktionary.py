"""
Stages that turn a compressed Wiktionary XML dump (pages-articles.xml.bz2) into English words.
"""

import bz2
import codecs
import re
from xml.etree import ElementTree

from lib import*
from stream import Stage, Emit

chunk_size=1<<16

class Bz2DecompressStage(Stage):
	"""
	Compressed bytes in, decompressed bytes out (at most chunk_size at a time).
	Concatenated bz2 streams are decompressed one after another.
	"""
	def __init__(self, chunk_size: int=chunk_size)->None:
		self.chunk_size=chunk_size
		self.decompressor=bz2.BZ2Decompressor()
		self.pending=False  # the current stream has started but not ended

	async def process(self, chunk: bytes, emit: Emit)->None:
		while True:
			if self.decompressor.eof:
				chunk=self.decompressor.unused_data+chunk
				if not chunk: return
				self.decompressor=bz2.BZ2Decompressor()
			if chunk: self.pending=True
			data=self.decompressor.decompress(chunk, self.chunk_size)
			chunk=b""
			if self.decompressor.eof:
				self.pending=False
			if data:
				await emit(data)
			if not self.decompressor.eof and self.decompressor.needs_input:
				return

	async def flush(self, emit: Emit)->None:
		if self.pending:
			raise EOFError("Compressed file ended before the end-of-stream marker was reached")


@dataclass(frozen=True)
class Page:
	namespace: str
	title: str
	text: str

class PageExtractStage(Stage):
	"""
	XML bytes in, one Page per <page> element out. XML namespaces are ignored.
	"""
	def __init__(self)->None:
		self.parser=ElementTree.XMLPullParser(events=("start", "end"))
		self.root: Optional[ElementTree.Element]=None

	async def process(self, chunk: bytes, emit: Emit)->None:
		self.parser.feed(chunk)
		await self.emit_pages(emit)

	async def flush(self, emit: Emit)->None:
		self.parser.close()  # raises ParseError if the document is incomplete
		await self.emit_pages(emit)

	async def emit_pages(self, emit: Emit)->None:
		for event, element in self.parser.read_events():
			if event=="start":
				if self.root is None: self.root=element
				continue
			if element.tag.rpartition("}")[2]!="page":
				continue
			page=Page(
					namespace=element.findtext("{*}ns") or "",
					title=element.findtext("{*}title") or "",
					text=element.findtext("{*}revision/{*}text") or "",
					)
			assert self.root is not None
			self.root.clear()  # finished pages are not needed anymore
			await emit(page)

non_word_title=re.compile(r"[-0-9,$.;!?…]*")  # nothing left after espeak punctuation is removed

def english_title(page: Page)->Optional[str]:
	"""
	Return the title of main-namespace pages that have an English entry.
	"""
	if page.namespace!="0":
		return None
	if "==English==" not in page.text:
		return None
	if non_word_title.fullmatch(page.title):
		return None
	return page.title


class LineSplitStage(Stage):
	"""
	UTF-8 bytes in, one word per non-blank line out.
	"""
	def __init__(self)->None:
		self.decoder=codecs.getincrementaldecoder("u8")()
		self.rest=""

	async def process(self, chunk: bytes, emit: Emit)->None:
		lines=(self.rest+self.decoder.decode(chunk)).split("\n")
		self.rest=lines.pop()
		for line in lines:
			await self.emit_line(line, emit)

	async def flush(self, emit: Emit)->None:
		await self.emit_line(self.rest+self.decoder.decode(b"", final=True), emit)
		self.rest=""

	async def emit_line(self, line: str, emit: Emit)->None:
		line=line.strip()
		if line:
			await emit(line)
