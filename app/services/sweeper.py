import logging
import threading
from typing import Callable, List, Optional
from sqlalchemy.orm import Session
from app.config import settings
from app.database import SessionLocal
from app.services.ledger import Ledger
from app.utils.timezone import Clock, now

logger = logging.getLogger(__name__)


class Sweeper:
    """Recurring job that expires overdue rentals and logs reminders for rentals about to expire."""
    
    def __init__(
        self,
        session_factory: Callable[[], Session] = SessionLocal,
        clock: Clock = now,
        interval_seconds: float = 60,
        reminder_window_days: float = 1
    ):
        self.session_factory = session_factory
        self.clock = clock
        self.interval_seconds = interval_seconds
        self.reminder_window_days = reminder_window_days
        self._thread: Optional[threading.Thread] = None
        self._stop_event = threading.Event()
        self._tick_lock = threading.Lock()
    
    def run_once(self) -> List[int]:
        """Run a single tick. Returns the ids of the rentals that were reminded.
        Errors are logged and swallowed so the schedule keeps going."""
        if not self._tick_lock.acquire(blocking=False):
            logger.warning("Previous sweeper tick still running, skipping this one")
            return []
        
        db = None
        try:
            db = self.session_factory()
            ledger = Ledger(db, clock=self.clock)
            ledger.sweep_expirations(self.clock())
            
            due_soon = ledger.list_upcoming_expirations(self.reminder_window_days, only_unreminded=True)
            for rental in due_soon:
                logger.info(
                    f"[REMINDER] Rental of \"{rental.book.title}\" by {rental.user_name} "
                    f"expires at {rental.expires_at.isoformat()}"
                )
            
            reminded_ids = [rental.id for rental in due_soon]
            ledger.mark_reminded(reminded_ids)
            return reminded_ids
        except Exception as e:
            logger.error(f"Sweeper tick failed: {e}", exc_info=True)
            return []
        finally:
            if db is not None:
                db.close()
            self._tick_lock.release()
    
    def _run(self):
        while not self._stop_event.wait(self.interval_seconds):
            self.run_once()
    
    def start(self):
        if self.is_running():
            logger.info("Sweeper already running")
            return
        
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._run, name="rental-sweeper", daemon=True)
        self._thread.start()
        logger.info(f"Sweeper started (interval: {self.interval_seconds}s, reminder window: {self.reminder_window_days} days)")
    
    def stop(self, timeout: Optional[float] = 5):
        if not self.is_running():
            return
        
        self._stop_event.set()
        self._thread.join(timeout)
        self._thread = None
        logger.info("Sweeper stopped")
    
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()


# Global sweeper instance owned by the application lifespan
sweeper = Sweeper(
    interval_seconds=settings.sweeper_interval_seconds,
    reminder_window_days=settings.sweeper_reminder_window_days
)
