"""
Test Fixtures

Common test classes used across test modules
"""

import threading
import time
from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from beanfactory import (
    BeanFactoryAware,
    BeanNameAware,
    DisposableBean,
    FactoryBean,
    InitializingBean,
    Lifecycle,
)


class Database:
    """Test database class"""

    def __init__(self):
        self.name = "TestDB"


class CacheService:
    """Test cache service"""

    def __init__(self):
        self.cache = {}


class UserRepository:
    """Test repository with dependencies"""

    def __init__(self, db: Database, cache: CacheService):
        self.db = db
        self.cache = cache


class CounterService:
    """Service with mutable state for testing singleton behavior"""

    def __init__(self):
        self.counter = 0

    def increment(self):
        self.counter += 1
        return self.counter


class ServiceWithoutHint:
    """Service with missing type hint - for error testing"""

    def __init__(self, dependency):  # No type hint!
        self.dependency = dependency


class ServiceWithDefaults:
    """Service whose plain-value parameters keep their defaults"""

    def __init__(self, db: Database, timeout: int = 30, name: str = "default"):
        self.db = db
        self.timeout = timeout
        self.name = name


class Level1:
    """First level of nested dependencies"""
    pass


class Level2:
    """Second level of nested dependencies"""

    def __init__(self, l1: Level1):
        self.l1 = l1


class Level3:
    """Third level of nested dependencies"""

    def __init__(self, l2: Level2):
        self.l2 = l2


# ----------------------------------------------------------------------
# Interface with several implementations
# ----------------------------------------------------------------------

class MessageSender(ABC):
    """Test interface"""

    @abstractmethod
    def send(self, message: str) -> str:
        ...


class EmailSender(MessageSender):
    def send(self, message: str) -> str:
        return f"email:{message}"


class SmsSender(MessageSender):
    def send(self, message: str) -> str:
        return f"sms:{message}"


class NotificationService:
    """Needs exactly one MessageSender"""

    def __init__(self, sender: MessageSender):
        self.sender = sender


class BroadcastService:
    """Takes every MessageSender"""

    def __init__(self, senders: List[MessageSender]):
        self.senders = senders


class SenderDirectory:
    """Takes every MessageSender by bean name"""

    def __init__(self, senders: Dict[str, MessageSender]):
        self.senders = senders


class OptionalSenderService:
    """MessageSender is optional"""

    def __init__(self, sender: Optional[MessageSender] = None):
        self.sender = sender


# ----------------------------------------------------------------------
# Property based collaborators (setter injection)
# ----------------------------------------------------------------------

class ServiceA:
    """Half of a circular reference through properties"""
    service_b: "ServiceB" = None


class ServiceB:
    """Other half of a circular reference through properties"""
    service_a: ServiceA = None


class SelfReferencing:
    """Asks for an instance of its own type in the constructor"""

    def __init__(self, other: "SelfReferencing"):
        self.other = other


class ConstructorCycleA:
    def __init__(self, b: "ConstructorCycleB"):
        self.b = b


class ConstructorCycleB:
    def __init__(self, a: ConstructorCycleA):
        self.a = a


class ReportService:
    """Collaborators and plain values set as properties"""
    database: Database = None
    cache: CacheService = None
    title: str = None
    page_size: int = 10


class Wrapper:
    """Stand-in for a proxy created by a post-processor"""

    def __init__(self, target):
        self.target = target


# ----------------------------------------------------------------------
# Lifecycle recording
# ----------------------------------------------------------------------

class EventLog:
    """Collects lifecycle events across beans"""

    def __init__(self):
        self.events: List[str] = []
        self._lock = threading.Lock()

    def record(self, event: str) -> None:
        with self._lock:
            self.events.append(event)


class Recorder(InitializingBean, DisposableBean, BeanNameAware):
    """Records init and destroy callbacks in the shared EventLog"""

    def __init__(self, log: EventLog):
        self.log = log
        self.bean_name = None

    def set_bean_name(self, name: str) -> None:
        self.bean_name = name

    def after_properties_set(self) -> None:
        self.log.record(f"init:{self.bean_name}")

    def destroy(self) -> None:
        self.log.record(f"destroy:{self.bean_name}")


class CustomCallbacks:
    """Uses custom init and destroy method names"""

    def __init__(self, log: EventLog):
        self.log = log

    def setup(self):
        self.log.record("setup")

    def teardown(self):
        self.log.record("teardown")


class Closeable:
    """Destroyed through the inferred close() method"""

    def __init__(self, log: EventLog):
        self.log = log

    def close(self):
        self.log.record("close")


class FactoryAwareBean(BeanFactoryAware, BeanNameAware):
    def __init__(self):
        self.bean_factory = None
        self.bean_name = None

    def set_bean_factory(self, bean_factory) -> None:
        self.bean_factory = bean_factory

    def set_bean_name(self, name: str) -> None:
        self.bean_name = name


class StartableServer(Lifecycle):
    """Lifecycle bean recording start and stop"""

    def __init__(self, log: EventLog):
        self.log = log
        self.running = False
        self.bean_name = None

    def start(self) -> None:
        self.running = True
        self.log.record(f"start:{id(self)}")

    def stop(self) -> None:
        self.running = False
        self.log.record(f"stop:{id(self)}")

    def is_running(self) -> bool:
        return self.running


class FailingService:
    """Constructor always raises"""

    def __init__(self):
        raise RuntimeError("boom")


class SlowService:
    """Counts instantiations; slow enough for threads to overlap"""
    instances = 0
    _lock = threading.Lock()

    def __init__(self):
        time.sleep(0.01)
        with SlowService._lock:
            SlowService.instances += 1


# ----------------------------------------------------------------------
# FactoryBean and factory methods
# ----------------------------------------------------------------------

class Connection:
    def __init__(self, url: str):
        self.url = url


class ConnectionFactoryBean(FactoryBean):
    """Produces Connection objects"""

    def __init__(self):
        self.url = "sqlite://memory"
        self.created = 0

    def get_object(self) -> Connection:
        self.created += 1
        return Connection(self.url)

    def get_object_type(self):
        return Connection


class ConnectionFactory:
    """Factory class with a static and an instance factory method"""

    def __init__(self):
        self.prefix = "pool"

    @staticmethod
    def create_default() -> Connection:
        return Connection("static://default")

    def create(self, name: str = "main") -> Connection:
        return Connection(f"{self.prefix}://{name}")


# ----------------------------------------------------------------------
# Lookup method injection
# ----------------------------------------------------------------------

class Command:
    """Stateful prototype"""

    def __init__(self):
        self.state = None


class CommandManager:
    """Singleton that needs a fresh Command per call"""

    def process(self, state):
        command = self.create_command()
        command.state = state
        return command

    def create_command(self) -> Command:
        raise NotImplementedError
