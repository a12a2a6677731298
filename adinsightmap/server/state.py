"""
AppState: everything one running service instance owns.

Built once by ``create_app()`` and stored on ``app.state.app_state``; route
handlers receive it through the ``get_app_state`` dependency. Tests build
their own with stub collaborators.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from fastapi import Request

from adinsightmap.config import Settings
from adinsightmap.core.GraphStore import GraphStore
from adinsightmap.core.LayerRegistry import LayerRegistry
from adinsightmap.scrapers.ad_fetch_chain import AdFetchChain

from .analysis_workflow import AnalysisWorkflow, CompetitorAnalyzer
from .events.event_emitter import EventEmitter
from .insight_orchestrator import InsightGenerator, InsightOrchestrator
from .llm_client import GroqClient


@dataclass
class AppState:
    settings: Settings
    emitter: EventEmitter
    store: GraphStore
    registry: LayerRegistry
    fetch_chain: AdFetchChain
    analyzer: CompetitorAnalyzer
    generator: InsightGenerator
    orchestrator: InsightOrchestrator
    workflow: AnalysisWorkflow


def build_app_state(
    settings: Optional[Settings] = None,
    fetch_chain: Optional[AdFetchChain] = None,
    llm: Optional[GroqClient] = None,
    analyzer: Optional[CompetitorAnalyzer] = None,
    generator: Optional[InsightGenerator] = None,
) -> AppState:
    """
    Wire the store, registry and services together.

    Any collaborator not passed in is built from *settings*. The analyzer and
    generator default to the same language-model client.
    """
    settings = settings or Settings.from_env()
    emitter = EventEmitter()

    store = GraphStore(on_change=emitter.fire)
    registry = LayerRegistry(store, on_change=emitter.fire)

    if fetch_chain is None:
        fetch_chain = AdFetchChain.from_settings(settings)
    if (analyzer is None or generator is None) and llm is None:
        llm = GroqClient.from_settings(settings)
    analyzer = analyzer or llm
    generator = generator or llm

    return AppState(
        settings=settings,
        emitter=emitter,
        store=store,
        registry=registry,
        fetch_chain=fetch_chain,
        analyzer=analyzer,
        generator=generator,
        orchestrator=InsightOrchestrator(store, registry, generator),
        workflow=AnalysisWorkflow(store, registry, analyzer, fetch_chain),
    )


def get_app_state(request: Request) -> AppState:
    return request.app.state.app_state
