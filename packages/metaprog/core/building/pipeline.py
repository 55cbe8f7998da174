"""Build pipeline: cache check, generation, persistence and the repair loop.

``build()`` resolves a description to a callable:

1. Look the description up in the cache. A hit is loaded and returned as is
   (declared tests are trusted to have passed when the artifact was stored,
   unless ``verify_cached`` is set).
2. On a miss, synthesize source, persist it with ``create`` and load it.
3. Run declared tests in order. A failing case enters the repair loop: the
   generator gets the prior source and the failure evidence, the result
   replaces the current artifact, is re-loaded and only that case is re-run.
   Up to ``retries`` attempts per failing case. Later cases run against the
   most recently repaired artifact.
4. A build that fails its tests for good, or whose freshly generated source
   does not load, drops the artifact from the cache before raising, so the
   next ``build()`` starts over with a cache miss.
"""

from __future__ import annotations

import time
from collections.abc import Callable, Sequence
from typing import Any

from metaprog.core.building.cases import TestCase
from metaprog.core.building.locks import description_lock
from metaprog.core.building.state import BuildReport, BuildState
from metaprog.core.caching.protocols import CacheHandler
from metaprog.core.errors import GenerationExhausted, LoadError, TestFailure
from metaprog.core.generation.protocols import Generator
from metaprog.core.utils.logging import get_logger

DEFAULT_RETRIES = 3


class BuildPipeline:
    """Orchestrates cache, generator and loader for one description.

    Concurrent ``build()`` calls for the same description and store within one
    event loop are serialized; the later one sees the earlier one's artifact
    as a cache hit.
    """

    def __init__(
        self,
        description: str,
        generator: Generator,
        cache_handler: CacheHandler,
        input_schemas: Sequence[Any] | None = None,
        output_schema: Any | None = None,
        retries: int = DEFAULT_RETRIES,
        verify_cached: bool = False,
    ) -> None:
        """
        Args:
            description: Natural-language description, used verbatim as cache key
            generator: Source generator
            cache_handler: Artifact store
            input_schemas: One schema per positional argument
            output_schema: Schema of the return value
            retries: Repair attempts per failing test case
            verify_cached: Run declared tests on cache hits as well
        """
        if retries < 0:
            raise ValueError(f"retries must be >= 0, got {retries}")

        self.description = description
        self.generator = generator
        self.cache_handler = cache_handler
        self.input_schemas = list(input_schemas) if input_schemas else None
        self.output_schema = output_schema
        self.retries = retries
        self.verify_cached = verify_cached
        self.tests: list[TestCase] = []
        self.last_report: BuildReport | None = None
        self._log = get_logger(__name__, description=description)

    def declare_test(self, case: TestCase) -> None:
        """Append a test case. Applies to every later ``build()`` call."""
        self.tests.append(case)

    async def fetch_code(self) -> str:
        """Current source of this description's artifact.

        Raises:
            NotFoundError: If nothing has been built yet
        """
        return await self.cache_handler.fetch_source(self.description)

    async def build(self) -> Callable[..., Any]:
        """Resolve the description to a callable.

        Raises:
            GenerationExhausted: If a failing test case could not be repaired
            NotFoundError, LoadError, GenerationError, LLMProviderError: Storage and
                generation failures outside the repair loop
        """
        report = BuildReport(description=self.description)
        self.last_report = report
        tests = list(self.tests)
        start = time.perf_counter()

        async with description_lock(self.cache_handler.store_key, self.description):
            try:
                func = await self._build(report, tests)
            except Exception:
                report.transition(BuildState.FAILED)
                raise
            finally:
                report.duration_seconds = time.perf_counter() - start

        report.transition(BuildState.DONE)
        return func

    async def _build(self, report: BuildReport, tests: list[TestCase]) -> Callable[..., Any]:
        report.transition(BuildState.CACHE_CHECK)
        artifact_id = await self.cache_handler.lookup(self.description)

        if artifact_id is not None:
            report.transition(BuildState.CACHE_HIT)
            report.cache_hit = True
            report.artifact_id = artifact_id
            self._log.debug(f"Cache hit for {self.description!r}: {artifact_id}")
            func = await self.cache_handler.load(artifact_id)
            if not (tests and self.verify_cached):
                return func
        else:
            report.transition(BuildState.GENERATING)
            self._log.info(f"Generating function for {self.description!r}")
            source = await self.generator.synthesize(
                self.description, self.input_schemas, self.output_schema
            )
            report.generations += 1
            artifact_id = await self.cache_handler.create(source, self.description)
            report.transition(BuildState.PERSISTED)
            report.artifact_id = artifact_id
            try:
                func = await self.cache_handler.load(artifact_id)
            except LoadError:
                await self._discard(report, "generated source does not load")
                raise

        if not tests:
            return func

        report.transition(BuildState.TEST_LOOP)
        for index, case in enumerate(tests, start=1):
            label = case.label(index)
            try:
                await case.run(func, label)
            except TestFailure as failure:
                self._log.warning(f"{self.description!r}: {failure}")
                artifact_id, func = await self._repair(report, case, label, failure, artifact_id)

        return func

    async def _repair(
        self,
        report: BuildReport,
        case: TestCase,
        label: str,
        failure: TestFailure,
        artifact_id: str,
    ) -> tuple[str, Callable[..., Any]]:
        """Regenerate until ``case`` passes or the retry bound is spent.

        Returns:
            The new artifact id and its loaded callable

        Raises:
            GenerationExhausted: After ``retries`` failed attempts
        """
        last_failure = failure

        for attempt in range(1, self.retries + 1):
            report.transition(BuildState.REPAIRING)
            report.repair_attempts[label] = attempt
            self._log.info(
                f"Repairing {self.description!r} for {label} "
                f"(attempt {attempt}/{self.retries})"
            )

            prior_source = await self.cache_handler.fetch_source(self.description)
            source = await self.generator.repair(
                self.description,
                prior_source,
                case.evidence(last_failure),
                self.input_schemas,
                self.output_schema,
            )
            report.generations += 1
            artifact_id = await self.cache_handler.replace(artifact_id, source, self.description)
            report.transition(BuildState.PERSISTED)
            report.artifact_id = artifact_id

            try:
                func = await self.cache_handler.load(artifact_id)
                report.transition(BuildState.TEST_LOOP)
                await case.run(func, label)
            except LoadError as e:
                # Unloadable source is a failed attempt; the load error is the evidence
                last_failure = TestFailure(label, error=e)
                last_failure.__cause__ = e
                self._log.warning(f"Repair attempt {attempt} for {label} did not load: {e}")
                continue
            except TestFailure as e:
                last_failure = e
                self._log.warning(f"Repair attempt {attempt} for {label} failed: {e}")
                continue

            self._log.info(f"Repaired {self.description!r} for {label} after {attempt} attempt(s)")
            return artifact_id, func

        self._log.error(
            f"Giving up on {self.description!r}: {label} still failing "
            f"after {self.retries} repair attempt(s)"
        )
        await self._discard(report, f"{label} never passed")
        raise GenerationExhausted(
            self.description,
            attempts=self.retries,
            case_label=label,
            last_error=last_failure,
        ) from last_failure

    async def _discard(self, report: BuildReport, reason: str) -> None:
        """Drop this description's artifact so a later build regenerates it."""
        removed = await self.cache_handler.discard(self.description)
        report.discarded.extend(removed)
        if removed:
            self._log.warning(f"Dropped artifact(s) {', '.join(removed)}: {reason}")
