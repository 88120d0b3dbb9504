"""
Chain asynchronous stages into one pipeline.

Stages are joined by bounded channels. Every stage runs in its own task and handles one item at a time;
`emit` suspends while the next channel is full, so a consumer that stops reading
eventually stops `accept` too. The first error in any stage cancels all stages
and is delivered once to the consumer.

	pipeline=Pipeline(MapStage(str.upper), BatchStage(2))
	await pipeline.accept("a")
	await pipeline.end()
	async for batch in pipeline: ...
"""

import asyncio
import collections
import enum
import functools
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Deque, List, Optional

Emit=Callable[[Any], Awaitable[None]]


class Stage:
	async def process(self, item: Any, emit: Emit)->None:
		raise NotImplementedError

	async def flush(self, emit: Emit)->None:
		"""
		Called once after the last item. Emit anything still buffered.
		"""
		pass

class MapStage(Stage):
	"""
	Apply a synchronous function to each item. None results are dropped.
	"""
	def __init__(self, function: Callable[[Any], Any])->None:
		self.function=function

	async def process(self, item: Any, emit: Emit)->None:
		result=self.function(item)
		if result is not None:
			await emit(result)

class BatchStage(Stage):
	"""
	Group items into lists of `size`. The last list may be shorter.
	"""
	def __init__(self, size: int)->None:
		assert size>0, size
		self.size=size
		self.batch: List[Any]=[]

	async def process(self, item: Any, emit: Emit)->None:
		self.batch.append(item)
		if len(self.batch)==self.size:
			batch, self.batch=self.batch, []
			await emit(batch)

	async def flush(self, emit: Emit)->None:
		if self.batch:
			batch, self.batch=self.batch, []
			await emit(batch)


class State(enum.Enum):
	idle      =enum.auto()
	flowing   =enum.auto()
	saturated =enum.auto()  # accept() is waiting for some channel to drain
	draining  =enum.auto()  # end() is waiting to enqueue the end marker
	flushing  =enum.auto()  # the end marker is travelling through the stages
	completed =enum.auto()
	failed    =enum.auto()
	closed    =enum.auto()  # stopped by the consumer before completion

class PipelineClosed(RuntimeError):
	pass

_end=object()

@dataclass(frozen=True)
class _Failure:
	error: BaseException

class Channel:
	def __init__(self, capacity: int)->None:
		self.capacity=capacity
		self.items: Deque[Any]=collections.deque()

	def full(self)->bool:
		return len(self.items)>=self.capacity


class Pipeline:
	def __init__(self, *stages: Stage, buffer_size: int=1)->None:
		assert stages
		assert buffer_size>0, buffer_size
		self.stages=stages
		self.buffer_size=buffer_size
		self.state=State.idle
		self.error: Optional[BaseException]=None
		self._finished=False  # completed, failed or closed
		self._exhausted=False  # the consumer has seen the end marker or the error
		self._channels: List[Channel]=[]  # _channels[i] is the input of stages[i], the last one is the output
		self._tasks: List[asyncio.Task]=[]
		self._supervisor: Optional[asyncio.Task]=None
		self._changed: Optional[asyncio.Condition]=None

	def _start(self)->None:
		if self.state!=State.idle: return
		self._changed=asyncio.Condition()
		self._channels=[Channel(self.buffer_size) for _ in range(len(self.stages)+1)]
		self._tasks=[asyncio.create_task(self._run_stage(i)) for i in range(len(self.stages))]
		self._supervisor=asyncio.create_task(self._supervise())
		self.state=State.flowing

	@property
	def ready(self)->bool:
		"""
		Whether accept() would take a chunk without waiting.
		"""
		return not self._finished and not any(channel.full() for channel in self._channels)

	async def accept(self, chunk: Any)->None:
		"""
		Wait until no channel is full, then enqueue chunk for the first stage.
		"""
		self._start()
		if self.state in (State.draining, State.flushing):
			raise PipelineClosed("accept() after end()")
		assert self._changed is not None
		async with self._changed:
			if not self.ready and not self._finished:
				self.state=State.saturated
			await self._changed.wait_for(lambda: self._finished or self.ready)
			if self._finished:
				raise PipelineClosed(f"pipeline is {self.state.name}")
			self.state=State.flowing
			self._channels[0].items.append(chunk)
			self._changed.notify_all()

	async def end(self)->None:
		"""
		Signal end of input. Every stage is flushed in order before the pipeline completes.
		"""
		self._start()
		if self._finished:
			raise PipelineClosed(f"pipeline is {self.state.name}")
		self.state=State.draining
		await self._put(self._channels[0], _end)

	async def abort(self, error: BaseException)->None:
		"""
		Fail the pipeline from outside (for example when reading the input fails).
		"""
		self._start()
		await self._stop(State.failed, error)

	async def aclose(self)->None:
		"""
		Stop all stages without flushing. Does nothing if the pipeline has already finished.
		"""
		self._start()
		await self._stop(State.closed)
		assert self._supervisor is not None
		await asyncio.shield(self._supervisor)

	def __aiter__(self)->"Pipeline":
		return self

	async def __anext__(self)->Any:
		self._start()
		if self._exhausted:
			raise StopAsyncIteration
		try:
			item=await self._get(self._channels[-1])
		except PipelineClosed:
			self._exhausted=True
			raise StopAsyncIteration
		if item is _end or isinstance(item, _Failure):
			self._exhausted=True
			assert self._supervisor is not None
			await asyncio.shield(self._supervisor)  # the state is final once the stages have been reaped
			if isinstance(item, _Failure):
				raise item.error
			raise StopAsyncIteration
		return item

	async def _put(self, channel: Channel, item: Any)->None:
		assert self._changed is not None
		async with self._changed:
			await self._changed.wait_for(lambda: self._finished or not channel.full())
			if self._finished:
				raise PipelineClosed(f"pipeline is {self.state.name}")
			channel.items.append(item)
			self._changed.notify_all()

	async def _get(self, channel: Channel)->Any:
		assert self._changed is not None
		async with self._changed:
			# items left in the output channel are still delivered after completion
			await self._changed.wait_for(lambda: self._finished or bool(channel.items))
			if not channel.items:
				raise PipelineClosed(f"pipeline is {self.state.name}")
			item=channel.items.popleft()
			self._changed.notify_all()
			return item

	async def _run_stage(self, index: int)->None:
		stage=self.stages[index]
		inbox=self._channels[index]
		emit=functools.partial(self._put, self._channels[index+1])
		while True:
			item=await self._get(inbox)
			if item is _end:
				if index==0 and self.state==State.draining:
					self.state=State.flushing
				await stage.flush(emit)
				await emit(_end)
				return
			await stage.process(item, emit)

	async def _stop(self, state: State, error: Optional[BaseException]=None)->None:
		assert self._changed is not None
		async with self._changed:
			if self._finished: return
			self._finished=True
			self.state=state
			self.error=error
			output=self._channels[-1]
			if state!=State.completed:
				output.items.clear()  # nothing after a failure reaches the consumer
			if error is not None:
				output.items.append(_Failure(error))
			self._changed.notify_all()
		if state!=State.completed:
			for task in self._tasks:
				task.cancel()

	async def _supervise(self)->None:
		await asyncio.wait(self._tasks, return_when=asyncio.FIRST_EXCEPTION)
		for task in self._tasks:  # report the error of the earliest stage
			if task.done() and not task.cancelled() and task.exception() is not None:
				await self._stop(State.failed, task.exception())
				break
		else:
			if all(task.done() and not task.cancelled() for task in self._tasks):
				await self._stop(State.completed)

		await asyncio.wait(self._tasks)
		for task in self._tasks:
			if not task.cancelled():
				task.exception()  # retrieved, so asyncio does not log it again
