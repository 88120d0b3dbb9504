#!/bin/python3
"""
Generate steno briefs for the English words of a Wiktionary dump.

Output is one JSON object per line: {"word": "BRIEF"}, or {"word": null} if no brief can be generated.
"""

import argparse
import asyncio
import contextlib
import functools
import json
import os
import shlex
import signal
from typing import BinaryIO, TextIO

from lib import*
from lib_steno import segment_record, synthesize_record, default_max_combinations
from lib_espeak import EspeakTranscriber, TranscribeStage, default_espeak_command
from lib_wiktionary import Bz2DecompressStage, PageExtractStage, LineSplitStage, english_title, chunk_size
from stream import Pipeline, PipelineClosed, Stage, MapStage, BatchStage

default_batch_size=400
progress_interval=1000

def to_ndjson(record: WordRecord)->str:
	return json.dumps({record.word: record.brief}, ensure_ascii=False, separators=(",", ":"))+"\n"

def build_pipeline(
		transcriber: Any,
		input_format: str="wiktionary",
		batch_size: int=default_batch_size,
		max_combinations: int=default_max_combinations,
		)->Pipeline:
	source: List[Stage]
	if input_format=="wiktionary":
		source=[Bz2DecompressStage(), PageExtractStage(), MapStage(english_title)]
	elif input_format=="lines":
		source=[LineSplitStage()]
	else:
		raise ValueError(f"unknown input format {input_format!r}")
	return Pipeline(
			*source,
			BatchStage(batch_size),
			TranscribeStage(transcriber),
			MapStage(segment_record),
			MapStage(functools.partial(synthesize_record, max_combinations=max_combinations)),
			MapStage(to_ndjson),
			)

async def generate(
		source: BinaryIO,
		sink: TextIO,
		pipeline: Pipeline,
		limit: Optional[int]=None,
		)->int:
	"""
	Feed source into pipeline and write its output to sink. Return the number of lines written.
	Reading is paused while the pipeline is saturated; once limit lines are written the pipeline is closed
	without draining.
	"""
	async def feed()->None:
		try:
			while True:
				chunk=await asyncio.to_thread(source.read, chunk_size)
				if not chunk: break
				await pipeline.accept(chunk)
			await pipeline.end()
		except PipelineClosed:
			pass  # the consumer has stopped
		except Exception as e:
			await pipeline.abort(e)

	count=0
	if limit is not None and limit<=0:
		return count
	feeder=asyncio.create_task(feed())
	try:
		async for line in pipeline:
			sink.write(line)
			count+=1
			if count%progress_interval==0:
				print(f"output {count}", file=sys.stderr)
			if count==limit:
				break
	finally:
		feeder.cancel()
		await pipeline.aclose()
		await asyncio.gather(feeder, return_exceptions=True)
	return count

def exit_on_signal(signum: int, frame: Any)->None:
	print(f"received {signal.Signals(signum).name}, exiting", file=sys.stderr)
	os._exit(128+signum)

def main(argv: Optional[Sequence[str]]=None)->int:
	parser=argparse.ArgumentParser(
			usage="Generate steno briefs for the English words in a Wiktionary dump.",
			formatter_class=argparse.ArgumentDefaultsHelpFormatter)
	parser.add_argument("-i", "--input", type=Path,
			help="Path to input file. Default to standard input.")
	parser.add_argument("-o", "--output", type=Path,
			help="Path to output file. Default to standard output.")
	parser.add_argument("-l", "--limit", type=int,
			help="Maximum number of output records. Default unlimited.")
	parser.add_argument("-f", "--format", choices=["wiktionary", "lines"], default="wiktionary",
			help="Input format: a bz2-compressed Wiktionary XML dump, or plain text with one word per line.")
	parser.add_argument("--batch-size", type=int, default=default_batch_size,
			help="Number of words per espeak call.")
	parser.add_argument("--max-combinations", type=int, default=default_max_combinations,
			help="Words with more chord combinations than this get no brief.")
	parser.add_argument("--espeak", default=shlex.join(default_espeak_command),
			help="Command that reads one word per line and prints one IPA pronunciation per line.")
	args=parser.parse_args(argv)

	signal.signal(signal.SIGINT, exit_on_signal)
	signal.signal(signal.SIGTERM, exit_on_signal)

	pipeline=build_pipeline(
			EspeakTranscriber(shlex.split(args.espeak)),
			input_format=args.format,
			batch_size=args.batch_size,
			max_combinations=args.max_combinations,
			)

	if args.input: print(f"reading from {args.input}", file=sys.stderr)
	if args.output: print(f"writing to {args.output}", file=sys.stderr)
	print(f"reporting progress every {progress_interval}", file=sys.stderr)
	try:
		with contextlib.ExitStack() as stack:
			source=stack.enter_context(open(args.input, "rb")) if args.input else sys.stdin.buffer
			sink=stack.enter_context(open(args.output, "w", encoding="u8")) if args.output else sys.stdout
			with timing("generate briefs"):
				count=asyncio.run(generate(source, sink, pipeline, args.limit))
	except Exception as e:
		print("error propagated to top level!", repr(e), file=sys.stderr)
		return 1
	print(f"Done. {count} words written.", file=sys.stderr)
	return 0

if __name__=="__main__":
	sys.exit(main())
