import asyncio
import bz2
from xml.etree import ElementTree

import pytest

from lib import*
from lib_wiktionary import Bz2DecompressStage, PageExtractStage, LineSplitStage, Page, english_title
from stream import Pipeline, PipelineClosed, MapStage

dump="""<mediawiki xmlns="http://www.mediawiki.org/xml/export-0.10/" version="0.10" xml:lang="en">
  <siteinfo>
    <sitename>Wiktionary</sitename>
  </siteinfo>
  <page>
    <title>cat</title>
    <ns>0</ns>
    <id>1</id>
    <revision>
      <id>2</id>
      <text bytes="40" xml:space="preserve">==English==
===Noun===
# A small carnivore.</text>
    </revision>
  </page>
  <page>
    <title>Katze</title>
    <ns>0</ns>
    <revision><text>==German==</text></revision>
  </page>
  <page>
    <title>Wiktionary:Main Page</title>
    <ns>4</ns>
    <revision><text>==English==</text></revision>
  </page>
  <page>
    <title>1,000</title>
    <ns>0</ns>
    <revision><text>==English==</text></revision>
  </page>
  <page>
    <title>ice cream</title>
    <ns>0</ns>
    <revision><text>==English==
==French==</text></revision>
  </page>
</mediawiki>
""".encode("u8")

def pieces(data: bytes, size: int)->List[bytes]:
	return [data[i:i+size] for i in range(0, len(data), size)]

def run_pipeline(pipeline: Pipeline, chunks: List[bytes])->List[Any]:
	async def main()->List[Any]:
		async def feed()->None:
			try:
				for chunk in chunks:
					await pipeline.accept(chunk)
				await pipeline.end()
			except PipelineClosed:
				pass
		feeder=asyncio.create_task(feed())
		output=[x async for x in pipeline]
		await feeder
		return output
	return asyncio.run(main())

def test_english_words_from_dump():
	pipeline=Pipeline(Bz2DecompressStage(), PageExtractStage(), MapStage(english_title))
	assert run_pipeline(pipeline, pieces(bz2.compress(dump), 7))==["cat", "ice cream"]

def test_pages():
	pages=run_pipeline(Pipeline(PageExtractStage()), pieces(dump, 10))
	assert [page.title for page in pages]==["cat", "Katze", "Wiktionary:Main Page", "1,000", "ice cream"]
	assert pages[0]==Page("0", "cat", "==English==\n===Noun===\n# A small carnivore.")
	assert pages[2].namespace=="4"

def test_pages_without_namespace():
	xml=b"<mediawiki><page><title>dog</title><ns>0</ns><revision><text>==English==</text></revision></page></mediawiki>"
	assert run_pipeline(Pipeline(PageExtractStage()), [xml])==[Page("0", "dog", "==English==")]

def test_incomplete_xml():
	with pytest.raises(ElementTree.ParseError):
		run_pipeline(Pipeline(PageExtractStage()), [dump[:-30]])

def test_english_title():
	assert english_title(Page("0", "cat", "==English==\n"))=="cat"
	assert english_title(Page("0", "cat", "==French==\n")) is None
	assert english_title(Page("14", "Category:English nouns", "==English==")) is None
	for title in ["1,000", "-", "$5", "3.14", "", "!", "?!", "…", ";!"]:
		assert english_title(Page("0", title, "==English==")) is None, title
	assert english_title(Page("0", "-ing", "==English==\n"))=="-ing"

def test_concatenated_streams():
	data=bz2.compress(b"hello ")+bz2.compress(b"world")
	output=run_pipeline(Pipeline(Bz2DecompressStage(chunk_size=3)), pieces(data, 5))
	assert b"".join(output)==b"hello world"
	assert all(len(x)<=3 for x in output)

def test_truncated_stream():
	data=bz2.compress(dump)
	with pytest.raises(EOFError):
		run_pipeline(Pipeline(Bz2DecompressStage()), pieces(data[:len(data)//2], 100))

def test_invalid_stream():
	with pytest.raises(OSError):
		run_pipeline(Pipeline(Bz2DecompressStage()), [b"this is not bz2 data"])

def test_lines():
	chunks=[b"cat\r\ndo", b"g\n\n  \n\xc3", b"\xa9t\xc3\xa9"]
	assert run_pipeline(Pipeline(LineSplitStage()), chunks)==["cat", "dog", "été"]
