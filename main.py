import argparse
import sys
from datetime import datetime

from bounded_queue import ConfigurationError
from config import (CAPACITY_RANGE, DEFAULT_TIMEOUT, DEMO_CONSUME_DELAY, DEMO_PRODUCE_DELAY,
                    ITEM_RANGE, SAMPLE_CONFIG, WORKER_RANGE, RunConfig)
from coordinator import Coordinator
from events import EventType
from log_monitor import Logger

PREVIEW_LIMIT = 20


def timestamp(ts) :
    return datetime.fromtimestamp(ts).strftime('%Y-%m-%d %H:%M:%S.%f')[:-3]


def print_event(event) :
    stamp = timestamp(event.timestamp)
    match event.kind :
        case EventType.PRODUCED :
            print(f'[{stamp}] Producer {event.worker} produced: {event.item}')
        case EventType.CONSUMED :
            print(f'[{stamp}] Consumer {event.worker} consumed: {event.item}')
        case EventType.PRODUCER_FINISHED :
            print(f'[{stamp}] Producer {event.worker} finished. Total produced: {event.count}')
        case EventType.CONSUMER_FINISHED :
            print(f'[{stamp}] Consumer {event.worker} finished. Total consumed: {event.count}')
        case EventType.CANCELLED :
            print(f'[{stamp}] {event.worker} interrupted after {event.count} items')


def print_config(config) :
    print('Configuration:')
    print(f'  - Queue Capacity: {config.capacity}')
    print(f'  - Number of Producers: {config.num_producers}')
    print(f'  - Number of Consumers: {config.num_consumers}')
    print(f'  - Total Items: {config.total_items}')
    print()


def print_report(report) :
    print('\n=== Analysis Results ===')

    print('\n1. Production Summary:')
    for name, count in report.produced_by.items() :
        print(f'   - Producer {name}: {count} items')
    print(f'   - Total Produced: {report.total_produced}')

    print('\n2. Consumption Summary:')
    for name, count in report.consumed_by.items() :
        print(f'   - Consumer {name}: {count} items')
    print(f'   - Total Consumed: {report.total_consumed}')

    print('\n3. Destination Items:')
    if len(report.destination) <= PREVIEW_LIMIT :
        print(f'   {report.destination}')
    else :
        print(f'   First 10: {report.destination[:10]}')
        print(f'   Last 10: {report.destination[-10:]}')
        print(f'   (Total: {len(report.destination)} items)')

    print('\n4. Verification:')
    print(f'   - Expected items: {report.expected_items}')
    print(f'   - Destination size: {report.sink_size}')
    print(f'   - Queue empty: {report.queue_empty_at_end}')
    print(f'   - All items transferred: {report.expected_items == report.sink_size}')
    print(f'   - Production matches consumption: {report.total_produced == report.total_consumed}')
    if report.monitor is not None :
        print(f"   - Monitor: {report.monitor['samples']} samples, "
              f"peak queue {report.monitor['peak_queue']}, mean {report.monitor['mean_queue']:.2f}")

    if report.timed_out :
        print('\n\033[1;31m⚠️  Warning: Execution timed out!\033[0m')
    if report.success :
        print('\n✓ All items transferred.')
    else :
        print('\n✗ Warning: Some items may not have been transferred correctly!')


def ranged_int(low, high) :
    def parse(text) :
        try :
            value = int(text)
        except ValueError :
            raise argparse.ArgumentTypeError(f'{text!r} is not a valid number')
        if value < low or value > high :
            raise argparse.ArgumentTypeError(f'please enter a number between {low} and {high}')
        return value
    return parse


def parse_arg(argv=None) :
    parser = argparse.ArgumentParser(description="Bounded buffer producer/consumer demo")

    parser.add_argument("--sample", action="store_true",
                        help="run the predefined task (capacity 5, 2 producers, 2 consumers, 10 items)")
    parser.add_argument("--capacity", type=ranged_int(*CAPACITY_RANGE), default=SAMPLE_CONFIG.capacity)
    parser.add_argument("--producers", type=ranged_int(*WORKER_RANGE), default=SAMPLE_CONFIG.num_producers)
    parser.add_argument("--consumers", type=ranged_int(*WORKER_RANGE), default=SAMPLE_CONFIG.num_consumers)
    parser.add_argument("--items", type=ranged_int(*ITEM_RANGE), default=SAMPLE_CONFIG.total_items)
    parser.add_argument("--timeout", type=float, default=DEFAULT_TIMEOUT,
                        help="seconds to wait for all workers before cancelling them")
    parser.add_argument("--produce-delay", type=float, default=DEMO_PRODUCE_DELAY,
                        help="simulated work after each insert, in seconds")
    parser.add_argument("--consume-delay", type=float, default=DEMO_CONSUME_DELAY,
                        help="simulated work after each removal, in seconds")
    parser.add_argument("--monitor-interval", type=float, default=None,
                        help="sample queue depth and process load every N seconds")
    parser.add_argument("--log-dir", default="log")
    parser.add_argument("--quiet", action="store_true", help="do not print per-item progress")

    return parser.parse_args(argv)


def build_config(arg) :
    if arg.sample :
        return RunConfig(
            capacity=SAMPLE_CONFIG.capacity,
            num_producers=SAMPLE_CONFIG.num_producers,
            num_consumers=SAMPLE_CONFIG.num_consumers,
            total_items=SAMPLE_CONFIG.total_items,
            timeout=arg.timeout,
            monitor_interval=arg.monitor_interval,
            async_events=True,
        ).with_demo_delays()
    return RunConfig(
        capacity=arg.capacity,
        num_producers=arg.producers,
        num_consumers=arg.consumers,
        total_items=arg.items,
        timeout=arg.timeout,
        produce_delay=arg.produce_delay,
        consume_delay=arg.consume_delay,
        monitor_interval=arg.monitor_interval,
        async_events=True,
    )


def run(config, quiet=False, log_dir="log") :
    logger = Logger.get_logger('bounded_buffer', log_dir)
    logger.info(f'Program START! config = {config}')

    coordinator = Coordinator(config, event_hook=None if quiet else print_event)
    coordinator.set_logger(logger)

    print('Starting threads...\n')
    report = coordinator.run()
    print_report(report)
    return report


def main(argv=None) :
    arg = parse_arg(argv)
    try :
        config = build_config(arg).validate()
    except ConfigurationError as e :
        print(f'Invalid configuration: {e}', file=sys.stderr)
        return 2

    print("=== Producer-Consumer Pattern Demo ===\n")
    print_config(config)
    report = run(config, quiet=arg.quiet, log_dir=arg.log_dir)
    print('\n=== Demo Complete ===')
    return 0 if report.success else 1


if __name__ == "__main__" :
    sys.exit(main())
