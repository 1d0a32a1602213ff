from __future__ import annotations

import json
import os
import traceback
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

LOG_BASENAME = 'xrpc-console'
REDACTED = '***redacted***'


def _now_iso() -> str:
    return datetime.now(timezone.utc).strftime('%Y-%m-%dT%H:%M:%S.%fZ')


def _safe_str(x: Any) -> str:
    try:
        return str(x)
    except Exception:
        return '<unprintable>'


def app_root() -> str:
    # directory holding main.py, one level above utils/
    return os.path.dirname(os.path.dirname(os.path.abspath(__file__)))


def resolve_dir(raw: Optional[str]) -> str:
    raw = os.path.expanduser(_safe_str(raw or 'logs'))
    return raw if os.path.isabs(raw) else os.path.join(app_root(), raw)


class LoggingHandler:
    """
    Per-aspect structured log sink for the console.

    Records are JSON lines (or ``key=value`` text) appended to one file under
    ``[LOG] dir``: a timestamped file per run, a shared ``xrpc-console.log``
    when ``per_run`` is off, or ``[LOG] file`` when set. Each aspect
    (settings, auth, dispatch, history, tui, errors) has its own level and
    payloads are redacted and truncated before they are written.

    The console owns the terminal in full-screen mode, so nothing is echoed
    to stdout.
    """

    _LEVELS = {'off': 0, 'basic': 1, 'detail': 2, 'trace': 3}

    _DEFAULTS = {
        'settings': 'basic',
        'auth': 'basic',
        'dispatch': 'basic',
        'history': 'off',
        'tui': 'off',
        'errors': 'basic',
    }

    _REDACT_KEYS = ['password', 'token', 'authorization', 'accessjwt', 'refreshjwt', 'access_token', 'refresh_token', 'secret']

    def __init__(self, config=None) -> None:
        self._config = config
        self._active = bool(self._get('active', False))
        fmt = _safe_str(self._get('format', 'json') or 'json').strip().lower()
        self._format = fmt if fmt in ('json', 'text') else 'json'
        self._redact = bool(self._get('redact', True))
        self._truncate = int(self._get('truncate_chars', 2000) or 2000)
        self._redact_keys = self._load_redact_keys()
        self._aspects = self._load_levels()

        self._run_id = datetime.now(timezone.utc).strftime('%Y%m%d_%H%M%S')
        self._log_path: Optional[str] = self._open_logfile() if self._active else None

    # --- Public helpers -------------------------------------------------
    def active(self) -> bool:
        return bool(self._active and self._log_path)

    @property
    def log_path(self) -> Optional[str]:
        return self._log_path

    def is_enabled(self, aspect: str, min_level: str = 'basic') -> bool:
        """Return True if logging is active and the given aspect meets the min level."""
        if not self.active():
            return False
        return self._aspects.get(aspect, 0) >= self._LEVELS.get(min_level, 1)

    def settings(self, effective: dict) -> None:
        self._emit('settings', 'basic', 'settings', 'main', effective)

    def auth_event(self, kind: str, details: dict, component: str = 'core.controller') -> None:
        self._emit('auth', 'basic', kind, component, details)

    def dispatch_start(self, meta: dict, component: str = 'core.dispatcher') -> None:
        self._emit('dispatch', 'basic', 'dispatch_start', component, meta)

    def dispatch_done(self, meta: dict, component: str = 'core.dispatcher') -> None:
        severity = 'info' if meta.get('ok') else 'warning'
        self._emit('dispatch', 'basic', 'dispatch_done', component, meta, severity=severity)

    def dispatch_detail(self, kind: str, details: dict, component: str = 'core.dispatcher') -> None:
        """Response bodies and other bulky payloads; needs log_dispatch = detail."""
        self._emit('dispatch', 'detail', kind, component, details)

    def history_event(self, kind: str, details: dict, component: str = 'core.history') -> None:
        self._emit('history', 'basic', kind, component, details)

    def tui_event(self, kind: str, details: dict, component: str = 'tui') -> None:
        self._emit('tui', 'basic', kind, component, details)

    def tui_detail(self, kind: str, details: dict, component: str = 'tui') -> None:
        self._emit('tui', 'detail', kind, component, details)

    def error(self, where: str, exc: BaseException, *, stack: Optional[str] = None) -> None:
        if not self.is_enabled('errors'):
            return
        s = stack or ''.join(traceback.format_exception(type(exc), exc, exc.__traceback__))
        details = {'message': _safe_str(exc), 'type': type(exc).__name__, 'stack': s}
        self._emit('errors', 'basic', 'error', where, details, severity='error')

    # --- Internals ------------------------------------------------------
    def _get(self, key: str, fallback: Any = None) -> Any:
        if self._config is None:
            return fallback
        try:
            return self._config.get_option('LOG', key, fallback)
        except Exception:
            return fallback

    def _load_levels(self) -> Dict[str, int]:
        # log_<aspect> wins, then [LOG] verbosity, then the built-in default
        base = self._get('verbosity', None)
        base = base.strip().lower() if isinstance(base, str) and base.strip() else None
        levels = {}
        for asp, default in self._DEFAULTS.items():
            raw = self._get(f'log_{asp}', None)
            name = raw.strip().lower() if isinstance(raw, str) and raw.strip() else (base or default)
            levels[asp] = self._LEVELS.get(name, 0)
        return levels

    def _load_redact_keys(self) -> List[str]:
        raw = self._get('redact_keys', None)
        if isinstance(raw, str) and raw.strip():
            return [k.strip().lower() for k in raw.split(',') if k.strip()]
        return list(self._REDACT_KEYS)

    def _open_logfile(self) -> Optional[str]:
        log_dir = resolve_dir(self._get('dir', 'logs'))
        explicit = _safe_str(self._get('file', '') or '').strip()
        if explicit:
            explicit = os.path.expanduser(explicit)
            path = explicit if os.path.isabs(explicit) else os.path.join(log_dir, explicit)
        elif self._get('per_run', True):
            path = os.path.join(log_dir, f'{LOG_BASENAME}-{self._run_id}.log')
        else:
            path = os.path.join(log_dir, f'{LOG_BASENAME}.log')
        try:
            os.makedirs(os.path.dirname(path), exist_ok=True)
            with open(path, 'a', encoding='utf-8'):
                pass
        except OSError:
            return None
        return path

    def _emit(self, aspect: str, level: str, event: str, component: str, data: dict, severity: str = 'info') -> None:
        if not self.is_enabled(aspect, level):
            return
        payload = {
            'ts': _now_iso(),
            'run_id': self._run_id,
            'event': event,
            'component': component,
            'aspect': aspect,
            'severity': severity,
            'data': self._scrub(data or {}),
        }
        line = self._as_json(payload) if self._format == 'json' else self._as_text(payload)
        try:
            with open(self._log_path, 'a', encoding='utf-8') as f:
                f.write(line + '\n')
        except OSError:
            pass

    def _scrub(self, obj: Any) -> Any:
        if isinstance(obj, str):
            if self._truncate and len(obj) > self._truncate:
                return obj[: self._truncate] + '…'
            return obj
        if isinstance(obj, dict):
            out = {}
            for k, v in obj.items():
                key = _safe_str(k)
                out[key] = REDACTED if self._redact and key.lower() in self._redact_keys else self._scrub(v)
            return out
        if isinstance(obj, (list, tuple)):
            return [self._scrub(x) for x in obj]
        return obj

    @staticmethod
    def _as_json(payload: Dict[str, Any]) -> str:
        try:
            return json.dumps(payload, ensure_ascii=False)
        except (TypeError, ValueError):
            return json.dumps(dict(payload, data=_safe_str(payload.get('data'))), ensure_ascii=False)

    @staticmethod
    def _as_text(payload: Dict[str, Any]) -> str:
        pairs = []
        for k, v in payload['data'].items():
            if isinstance(v, (dict, list)):
                try:
                    v = json.dumps(v, ensure_ascii=False)
                except (TypeError, ValueError):
                    v = _safe_str(v)
            pairs.append(f'{k}={v}')
        head = f"[{payload['ts']}] {payload['component']} {payload['aspect']}:{payload['event']}"
        return ' '.join([head] + pairs)
