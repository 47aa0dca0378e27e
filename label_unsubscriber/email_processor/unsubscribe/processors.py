"""
Unsubscribe processing pipeline.

This module handles the per-message workflow and the batch around it:
- Resolving candidate actions from headers and body, ranked by priority
- Executing the best action and classifying the result
- Moving the message from the pending marker to a terminal marker
- Recording exactly one audit outcome per message, even on error
- Isolating per-message failures during a batch run
"""

from abc import ABC, abstractmethod
from typing import Callable, Iterable, List, Optional

from .classifiers import ActionParser
from .extractors import HeaderExtractor, LinkScanner
from .logging import UnsubscribeLogger
from .outcomes import describe_action, no_action_outcome, error_outcome
from .ranking import ActionRanker
from .types import RawMessage, UnsubscribeAction, RankedActions, Outcome, BatchResult


class LabelStore(ABC):
    """Applies the pending -> succeeded/failed transition to a message."""

    @abstractmethod
    def transition(self, message: RawMessage, succeeded: bool) -> None:
        """Remove the pending marker and add the terminal marker, together."""
        pass


class AuditLog(ABC):
    """Append-only sink for outcome records."""

    @abstractmethod
    def record(self, message: RawMessage, outcome: Outcome) -> None:
        pass


class ActionResolver:
    """Collect and rank the candidate unsubscribe actions of a message."""

    def __init__(
        self,
        extractor: Optional[HeaderExtractor] = None,
        parser: Optional[ActionParser] = None,
        scanner: Optional[LinkScanner] = None,
        ranker: Optional[ActionRanker] = None
    ):
        self.extractor = extractor or HeaderExtractor()
        self.parser = parser or ActionParser()
        self.scanner = scanner or LinkScanner()
        self.ranker = ranker or ActionRanker()

    def candidates(self, message: RawMessage) -> List[UnsubscribeAction]:
        """Header actions in target order, then at most one body link."""
        headers = self.extractor.extract(message.header_block)
        targets = self.extractor.split_targets(headers.unsubscribe)
        actions = self.parser.parse_all(targets, headers.post)

        link_action = self.scanner.scan(message.html_body)
        if link_action is not None:
            actions.append(link_action)

        return actions

    def resolve(self, message: RawMessage) -> RankedActions:
        return self.ranker.rank(self.candidates(message))


class ThreadProcessor:
    """Process one message: resolve, execute, transition, record."""

    def __init__(self, resolver: ActionResolver, executor, label_store: LabelStore, audit_log: AuditLog):
        """
        Args:
            resolver: Produces the ranked candidate actions
            executor: ActionExecutor (or anything with execute(action) -> ExecutionResult)
            label_store: Applies the terminal marker
            audit_log: Receives the outcome record
        """
        self.resolver = resolver
        self.executor = executor
        self.label_store = label_store
        self.audit_log = audit_log
        self.logger = UnsubscribeLogger("thread_processor")

    def process(self, message: RawMessage) -> Outcome:
        """
        Process a message and return its outcome.

        On error the message is still marked failed and a failure outcome is
        recorded; then the original exception is re-raised.
        """
        attempt = None
        transitioned = False

        with self.logger.scoped_context({
            'message_key': message.key,
            'from': message.from_address,
            'subject': message.subject
        }):
            try:
                ranked = self.resolver.resolve(message)
                self.logger.debug("Resolved unsubscribe candidates", {
                    'candidates': [action.to_dict() for action in ranked]
                })

                if not ranked:
                    outcome = no_action_outcome()
                else:
                    attempt = describe_action(ranked[0])
                    result = self.executor.execute(attempt.action)
                    outcome = attempt.outcome(result.confirmed)

                self.label_store.transition(message, outcome.succeeded)
                transitioned = True
                self.audit_log.record(message, outcome)

                self.logger.info(outcome.summary, outcome.to_dict())
                self.logger.log_operation_count(
                    attempt.action.kind if attempt else 'none', outcome.succeeded
                )
                return outcome

            except Exception as e:
                outcome = error_outcome(e, attempt)
                self.logger.log_exception(e, outcome.to_dict())
                self.logger.log_operation_count('error', False)

                try:
                    if not transitioned:
                        self.label_store.transition(message, False)
                except Exception as transition_error:
                    self.logger.log_exception(transition_error, {'stage': 'fallback_transition'})
                finally:
                    try:
                        self.audit_log.record(message, outcome)
                    except Exception as record_error:
                        self.logger.log_exception(record_error, {'stage': 'record'})
                raise e


class BatchRunner:
    """Run a sequence of pending messages through a ThreadProcessor."""

    def __init__(self, processor: ThreadProcessor,
                 on_error: Optional[Callable[[RawMessage, Exception], None]] = None):
        self.processor = processor
        self.on_error = on_error
        self.logger = UnsubscribeLogger("batch_runner")

    def run(self, messages: Iterable[RawMessage]) -> BatchResult:
        """
        Process every message in order. A failing message is counted and
        skipped; it never stops the batch.
        """
        result = BatchResult()

        with self.logger.time_operation("unsubscribe_batch"):
            for message in messages:
                result.processed += 1
                try:
                    outcome = self.processor.process(message)
                except Exception as e:
                    result.failed += 1
                    result.errors.append((message, e))
                    self.logger.warning("Message failed, continuing with next", {
                        'message_key': message.key,
                        'error': str(e)
                    })
                    if self.on_error is not None:
                        self.on_error(message, e)
                    continue

                result.outcomes.append(outcome)
                if outcome.succeeded:
                    result.succeeded += 1
                else:
                    result.failed += 1

        self.logger.info("Unsubscribe batch finished", result.to_dict())
        return result
