import math
from dataclasses import dataclass, replace

from bounded_queue import ConfigurationError

DEFAULT_TIMEOUT = 30.0
DEMO_PRODUCE_DELAY = 0.05
DEMO_CONSUME_DELAY = 0.075
#seconds the coordinator waits for cancelled workers to wind down
CANCEL_GRACE = 2.0

#limits enforced by the command line
CAPACITY_RANGE = (1, 100)
WORKER_RANGE = (1, 10)
ITEM_RANGE = (1, 1000)


def _positive_int(name, value) :
    if isinstance(value, bool) or not isinstance(value, int) :
        raise ConfigurationError(f'{name} must be an integer, got {value!r}')
    if value <= 0 :
        raise ConfigurationError(f'{name} must be positive, got {value}')


def _non_negative(name, value) :
    if isinstance(value, bool) or not isinstance(value, (int, float)) :
        raise ConfigurationError(f'{name} must be a number, got {value!r}')
    if not math.isfinite(value) :
        raise ConfigurationError(f'{name} must be finite, got {value}')
    if value < 0 :
        raise ConfigurationError(f'{name} must not be negative, got {value}')


@dataclass(frozen=True)
class RunConfig :
    capacity: int
    num_producers: int
    num_consumers: int
    total_items: int
    timeout: float = DEFAULT_TIMEOUT
    produce_delay: float = 0.0
    consume_delay: float = 0.0
    monitor_interval: float = None
    async_events: bool = False

    def validate(self) :
        _positive_int('capacity', self.capacity)
        _positive_int('num_producers', self.num_producers)
        _positive_int('num_consumers', self.num_consumers)
        _positive_int('total_items', self.total_items)
        _non_negative('timeout', self.timeout)
        if self.timeout == 0 :
            raise ConfigurationError('timeout must be positive')
        _non_negative('produce_delay', self.produce_delay)
        _non_negative('consume_delay', self.consume_delay)
        if self.monitor_interval is not None :
            _non_negative('monitor_interval', self.monitor_interval)
            if self.monitor_interval == 0 :
                raise ConfigurationError('monitor_interval must be positive')
        return self

    def with_demo_delays(self) :
        return replace(self, produce_delay=DEMO_PRODUCE_DELAY, consume_delay=DEMO_CONSUME_DELAY)


SAMPLE_CONFIG = RunConfig(capacity=5, num_producers=2, num_consumers=2, total_items=10)
