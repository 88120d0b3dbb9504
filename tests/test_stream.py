import asyncio
import itertools

import pytest

from lib import*
from stream import Pipeline, PipelineClosed, State, Stage, MapStage, BatchStage

async def feed(pipeline: Pipeline, items: Iterable[Any])->None:
	try:
		for item in items:
			await pipeline.accept(item)
		await pipeline.end()
	except PipelineClosed:
		pass

async def run_pipeline(pipeline: Pipeline, items: Iterable[Any])->List[Any]:
	feeder=asyncio.create_task(feed(pipeline, items))
	output=[x async for x in pipeline]
	await feeder
	return output

class Recorder(Stage):
	def __init__(self, name: str, log: List[str])->None:
		self.name=name
		self.log=log

	async def process(self, item: Any, emit: Any)->None:
		await emit(item)

	async def flush(self, emit: Any)->None:
		self.log.append(self.name)
		await emit(f"{self.name} flushed")

def test_batches():
	pipeline=Pipeline(BatchStage(400))
	output=asyncio.run(run_pipeline(pipeline, range(401)))
	assert output==[[*range(400)], [400]]
	assert pipeline.state==State.completed

def test_map_drops_none():
	pipeline=Pipeline(MapStage(lambda x: x if x%2 else None))
	assert asyncio.run(run_pipeline(pipeline, range(6)))==[1, 3, 5]

def test_empty_input():
	pipeline=Pipeline(BatchStage(3))
	assert asyncio.run(run_pipeline(pipeline, []))==[]
	assert pipeline.state==State.completed

def test_flush_in_stage_order():
	log: List[str]=[]
	pipeline=Pipeline(Recorder("a", log), Recorder("b", log), Recorder("c", log))
	output=asyncio.run(run_pipeline(pipeline, [1, 2]))
	assert output==[1, 2, "a flushed", "b flushed", "c flushed"]
	assert log==["a", "b", "c"]

def test_backpressure():
	async def main()->None:
		pipeline=Pipeline(MapStage(lambda x: x))
		accepted=0
		async def feeder()->None:
			nonlocal accepted
			for i in range(10):
				await pipeline.accept(i)
				accepted+=1
			await pipeline.end()
		task=asyncio.create_task(feeder())
		for _ in range(50):
			await asyncio.sleep(0)
		assert accepted<=2
		assert pipeline.state==State.saturated
		assert not pipeline.ready

		assert [x async for x in pipeline]==[*range(10)]
		await task
		assert accepted==10
		assert pipeline.state==State.completed
	asyncio.run(main())

def test_error_is_delivered_once():
	def fail_on_three(x: int)->int:
		if x==3: raise ValueError("three")
		return x

	async def main()->None:
		pipeline=Pipeline(MapStage(fail_on_three), MapStage(lambda x: x))
		feeder=asyncio.create_task(feed(pipeline, range(10)))
		received=[]
		with pytest.raises(ValueError, match="three"):
			async for x in pipeline:
				received.append(x)
		assert received==[0, 1, 2][:len(received)]
		assert pipeline.state==State.failed
		assert isinstance(pipeline.error, ValueError)
		with pytest.raises(StopAsyncIteration):
			await pipeline.__anext__()
		with pytest.raises(PipelineClosed):
			await pipeline.accept(11)
		await feeder
	asyncio.run(main())

def test_error_cancels_other_stages():
	cancelled: List[bool]=[]
	class Slow(Stage):
		async def process(self, item: Any, emit: Any)->None:
			try:
				await asyncio.sleep(3600)
			except asyncio.CancelledError:
				cancelled.append(True)
				raise

	def fail_on_one(x: int)->int:
		if x==1: raise KeyError(x)
		return x

	async def main()->None:
		pipeline=Pipeline(MapStage(fail_on_one), Slow())
		feeder=asyncio.create_task(feed(pipeline, range(3)))
		with pytest.raises(KeyError):
			async for _ in pipeline: pass
		await feeder
	asyncio.run(main())
	assert cancelled==[True]

def test_abort():
	async def main()->None:
		pipeline=Pipeline(MapStage(lambda x: x))
		await pipeline.abort(OSError("cannot read"))
		with pytest.raises(OSError, match="cannot read"):
			await pipeline.__anext__()
		assert pipeline.state==State.failed
	asyncio.run(main())

def test_close_early():
	async def main()->None:
		pipeline=Pipeline(MapStage(lambda x: x*2))
		feeder=asyncio.create_task(feed(pipeline, itertools.count()))
		received=[]
		async for x in pipeline:
			received.append(x)
			if len(received)==3: break
		await pipeline.aclose()
		await feeder
		assert received==[0, 2, 4]
		assert pipeline.state==State.closed
		assert [x async for x in pipeline]==[]
		await pipeline.aclose()
	asyncio.run(main())

def test_accept_after_end():
	async def main()->None:
		pipeline=Pipeline(MapStage(lambda x: x))
		assert await run_pipeline(pipeline, [1])==[1]
		with pytest.raises(PipelineClosed):
			await pipeline.accept(2)
		with pytest.raises(PipelineClosed):
			await pipeline.end()
	asyncio.run(main())

def test_close_before_start():
	async def main()->None:
		pipeline=Pipeline(MapStage(lambda x: x))
		await pipeline.aclose()
		assert pipeline.state==State.closed
		with pytest.raises(PipelineClosed):
			await pipeline.accept(1)
	asyncio.run(main())
