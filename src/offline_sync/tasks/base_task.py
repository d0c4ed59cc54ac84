"""
Base task execution

Common retry/result handling for the jobs run by the job service.
"""

import time
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Dict, Any, Tuple, Type

from offline_sync.utils.loguru_setting import logger

CONNECTION_ERROR_KEYWORDS = ('timeout', 'connection', 'connect', 'database', 'locked')


def is_connection_error(error_msg: str) -> bool:
    """Heuristic: transient database/connection failures are worth a retry"""
    return any(keyword in error_msg.lower() for keyword in CONNECTION_ERROR_KEYWORDS)


class BaseTask(ABC):
    """Base task"""

    # failures that are never retried, whatever their message says
    non_retryable_exceptions: Tuple[Type[BaseException], ...] = ()

    def __init__(self, task_name: str, max_retries: int = 3, retry_delay: int = 5):
        """
        Args:
            task_name: task name used in logs and results
            max_retries: maximum attempts
            retry_delay: delay between attempts (seconds)
        """
        self.task_name = task_name
        self.max_retries = max_retries
        self.retry_delay = retry_delay

    @abstractmethod
    def execute_task(self) -> Dict[str, Any]:
        """
        Task body (implemented by subclasses)

        Returns:
            Dict[str, Any]: task result
        """

    def run(self) -> Dict[str, Any]:
        """
        Run the task, retrying connection errors

        Returns:
            Dict[str, Any]: task result, ``success`` tells the outcome
        """
        for attempt in range(1, self.max_retries + 1):
            try:
                logger.info(f"[{self.task_name}] task started (attempt {attempt}/{self.max_retries})")
                start_time = datetime.now()

                result = self.execute_task()

                duration = (datetime.now() - start_time).total_seconds()
                logger.info(f"[{self.task_name}] task finished in {duration:.2f}s")

                if isinstance(result, dict):
                    result['execution_time'] = duration
                    result['attempt'] = attempt

                return result

            except self.non_retryable_exceptions as e:
                logger.error(f"[{self.task_name}] task rejected: {e}")
                return self._create_error_result(str(e), attempt)

            except Exception as e:
                error_msg = str(e)
                logger.error(f"[{self.task_name}] task failed (attempt {attempt}/{self.max_retries}): {error_msg}")

                if is_connection_error(error_msg) and attempt < self.max_retries:
                    logger.warning(f"[{self.task_name}] connection error, retrying in {self.retry_delay}s...")
                    time.sleep(self.retry_delay)
                elif attempt >= self.max_retries:
                    logger.error(f"[{self.task_name}] giving up after {self.max_retries} attempts")
                    return self._create_error_result(error_msg, attempt)
                else:
                    logger.error(f"[{self.task_name}] non connection error, not retrying")
                    return self._create_error_result(error_msg, attempt)

        return self._create_error_result("unknown error", self.max_retries)

    def _create_error_result(self, error_msg: str, attempt: int) -> Dict[str, Any]:
        return {
            'success': False,
            'error': error_msg,
            'attempt': attempt,
            'task_name': self.task_name,
            'timestamp': datetime.now().isoformat()
        }

    def _create_success_result(self, **kwargs) -> Dict[str, Any]:
        result = {
            'success': True,
            'task_name': self.task_name,
            'timestamp': datetime.now().isoformat()
        }
        result.update(kwargs)
        return result


class TaskExecutor:
    """Run a plain function with the same retry policy as BaseTask"""

    @staticmethod
    def execute_with_retry(
        task_func,
        task_name: str,
        max_retries: int = 3,
        retry_delay: int = 5,
        **kwargs
    ) -> Dict[str, Any]:
        """
        Args:
            task_func: function to run
            task_name: task name used in logs and results
            max_retries: maximum attempts
            retry_delay: delay between attempts (seconds)
            **kwargs: arguments of task_func

        Returns:
            Dict[str, Any]: ``success`` plus ``result`` or ``error``
        """
        for attempt in range(1, max_retries + 1):
            try:
                logger.info(f"[{task_name}] task started (attempt {attempt}/{max_retries})")
                start_time = datetime.now()

                result = task_func(**kwargs)

                duration = (datetime.now() - start_time).total_seconds()
                logger.info(f"[{task_name}] task finished in {duration:.2f}s")

                return {
                    'success': True,
                    'result': result,
                    'execution_time': duration,
                    'attempt': attempt,
                    'task_name': task_name
                }

            except Exception as e:
                error_msg = str(e)
                logger.error(f"[{task_name}] task failed (attempt {attempt}/{max_retries}): {error_msg}")

                if is_connection_error(error_msg) and attempt < max_retries:
                    logger.warning(f"[{task_name}] connection error, retrying in {retry_delay}s...")
                    time.sleep(retry_delay)
                else:
                    return {
                        'success': False,
                        'error': error_msg,
                        'attempt': attempt,
                        'task_name': task_name
                    }

        return {
            'success': False,
            'error': "unknown error",
            'attempt': max_retries,
            'task_name': task_name
        }
