import json
import logging
import os
import threading
from datetime import datetime
from logging.handlers import RotatingFileHandler

import numpy as np
import psutil

LOG_DIR = "log"
ROOT_LOGGER_NAME = "bounded_buffer"


class JsonFormatter(logging.Formatter):
    def format(self, record):
        log = {
            "level": record.levelname,
            "time": datetime.now().strftime("%Y-%m-%d %H:%M:%S"),
            "module": record.module,
            "thread": record.threadName,
            "message": record.getMessage(),
        }
        if record.exc_info:
            log["exception"] = self.formatException(record.exc_info)
        return json.dumps(log, ensure_ascii=False)


class Logger :
    @staticmethod
    def get_logger(name=ROOT_LOGGER_NAME, log_dir=LOG_DIR):
        logger = logging.getLogger(name)
        logger.setLevel(logging.INFO)

        if logger.handlers:
            return logger

        if not os.path.exists(log_dir):
            os.makedirs(log_dir)

        # --- System Log Handler ---
        system_handler = RotatingFileHandler(
            os.path.join(log_dir, "system.log"), maxBytes=5*1024*1024, backupCount=10
        )
        system_handler.setFormatter(JsonFormatter())
        system_handler.setLevel(logging.INFO)

        # --- Error Log Handler ---
        error_handler = RotatingFileHandler(
            os.path.join(log_dir, "error.log"), maxBytes=5*1024*1024, backupCount=10
        )
        error_handler.setFormatter(JsonFormatter())
        error_handler.setLevel(logging.ERROR)

        logger.addHandler(system_handler)
        logger.addHandler(error_handler)

        return logger


class Monitor:
    """Samples queue depth, sink size and process load while a run is in flight."""

    def __init__(self, interval=1.0):
        self.interval = interval

        self.stop_event = None
        self.q = None
        self.sink = None
        self.logger = logging.getLogger(ROOT_LOGGER_NAME + ".monitor")
        self.process = psutil.Process()
        self.samples = []

        self.data = {
            "queue_size": 0,
            "sink_size": 0,
            "waiting_inserters": 0,
            "waiting_removers": 0,
            "cpu_usage": 0.0,
            "memory_mb": 0.0,
        }

    def set_logger(self, logger_object) :
        self.logger = logger_object
        self.logger.info('monitor class object activate')

    def set_stop_event(self, event) :
        self.stop_event = event

    def set_queue(self, q) :
        self.q = q

    def set_sink(self, sink) :
        self.sink = sink

    def update(self, key, value):
        self.data[key] = value

    def is_stop(self) :
        if self.stop_event is None :
            return False
        return self.stop_event.is_set()

    def sample(self):
        if self.q is not None:
            stats = self.q.stats()
            self.update("queue_size", stats.size)
            self.update("waiting_inserters", stats.waiting_inserters)
            self.update("waiting_removers", stats.waiting_removers)
        if self.sink is not None:
            self.update("sink_size", self.sink.size())
        self.update("cpu_usage", psutil.cpu_percent())
        self.update("memory_mb", self.process.memory_info().rss / 1024 / 1024)

        snapshot = dict(self.data)
        self.samples.append(snapshot)

        self.logger.debug(
            "[Q] size:%d wait_in:%d wait_out:%d | [SINK] %d | [CPU] %.0f%% | [MEM] %.0fMB",
            snapshot["queue_size"], snapshot["waiting_inserters"], snapshot["waiting_removers"],
            snapshot["sink_size"], snapshot["cpu_usage"], snapshot["memory_mb"],
        )
        return snapshot

    def run(self):
        if self.stop_event is None:
            self.stop_event = threading.Event()
        while not self.is_stop():
            self.sample()
            self.stop_event.wait(self.interval)
        #one last look at the final state
        self.sample()

    def summary(self):
        if not self.samples:
            return {"samples": 0, "peak_queue": 0, "mean_queue": 0.0, "peak_memory_mb": 0.0}
        depths = np.array([s["queue_size"] for s in self.samples])
        memory = np.array([s["memory_mb"] for s in self.samples])
        return {
            "samples": len(self.samples),
            "peak_queue": int(depths.max()),
            "mean_queue": float(depths.mean()),
            "peak_memory_mb": float(memory.max()),
        }
