"""Strategy dispatch and chain-of-thought suppression."""

import logging
from collections.abc import Sequence
from dataclasses import replace

from civicscoach.models import PromptBundle, ScoredChunk
from civicscoach.strategies.base import (
    REASONING_PERMITTED,
    REASONING_SUPPRESSED,
    PromptOptions,
    PromptStrategy,
)
from civicscoach.strategies.chain_of_thought import ChainOfThoughtStrategy
from civicscoach.strategies.dynamic import DynamicStrategy
from civicscoach.strategies.multi_shot import MultiShotStrategy
from civicscoach.strategies.one_shot import OneShotStrategy
from civicscoach.strategies.rtfc import RTFCStrategy
from civicscoach.strategies.zero_shot import ZeroShotStrategy

logger = logging.getLogger(__name__)

STRATEGIES: dict[str, PromptStrategy] = {
    s.name: s
    for s in (
        ChainOfThoughtStrategy(),
        ZeroShotStrategy(),
        DynamicStrategy(),
        OneShotStrategy(),
        MultiShotStrategy(),
        RTFCStrategy(),
    )
}


def select_strategy(
    use_zero_shot: bool = False,
    use_dynamic_prompting: bool = True,
    forced: str | None = None,
) -> PromptStrategy:
    """Pick a strategy. forced (a strategy name) wins over the flags.

    The flags only reach zero-shot, dynamic and chain-of-thought; the
    example-driven and RTFC strategies are selected by name.

    Raises KeyError for an unknown forced name.
    """
    if forced is not None:
        return STRATEGIES[forced]
    if use_zero_shot:
        return STRATEGIES["zero-shot"]
    if use_dynamic_prompting:
        return STRATEGIES["dynamic"]
    return STRATEGIES["chain-of-thought"]


def suppress_reasoning(bundle: PromptBundle) -> PromptBundle:
    """Swap the reasoning-permission sentence in the first message for a direct-answer one.

    Returns the bundle unchanged when the sentence is absent.
    """
    first = bundle.messages[0]
    if REASONING_PERMITTED not in first.content:
        return bundle
    rewritten = replace(first, content=first.content.replace(REASONING_PERMITTED, REASONING_SUPPRESSED, 1))
    features = tuple(f for f in bundle.metadata.features if f != "reasoning_permitted")
    return replace(
        bundle,
        messages=(rewritten, *bundle.messages[1:]),
        metadata=replace(bundle.metadata, features=(*features, "reasoning_suppressed")),
    )


def assemble(
    query: str,
    proficiency: str,
    chunks: Sequence[ScoredChunk],
    options: PromptOptions,
    use_cot: bool = True,
    use_zero_shot: bool = False,
    use_dynamic_prompting: bool = True,
    forced: str | None = None,
) -> PromptBundle:
    strategy = select_strategy(use_zero_shot, use_dynamic_prompting, forced)
    bundle = strategy.build_messages(query, proficiency, chunks, options)
    if not use_cot:
        bundle = suppress_reasoning(bundle)
    logger.debug(
        "Prompt strategy %s: %d messages, features=%s",
        strategy.name,
        len(bundle.messages),
        ",".join(bundle.metadata.features),
    )
    return bundle
