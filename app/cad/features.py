from __future__ import annotations

from collections.abc import Callable
from functools import wraps
from typing import Any

from sqlalchemy.orm import Session

from app.cad.constants import Feature
from app.cad.db import db_session
from app.cad.errors import FeatureDisabledError


def feature_map(s: Session) -> dict[str, bool]:
    """Every known feature with its effective state (missing rows mean enabled)."""
    from app.cad.modules.cad_settings.models import CadFeature

    stored = {f.feature: f.is_enabled for f in s.query(CadFeature).all()}
    return {feature.value: stored.get(feature.value, True) for feature in Feature}


def is_feature_enabled(s: Session, feature: Feature) -> bool:
    from app.cad.modules.cad_settings.models import CadFeature

    row = s.query(CadFeature).filter(CadFeature.feature == feature.value).one_or_none()
    if row is None:
        return True
    return row.is_enabled


def require_feature(feature: Feature) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    def decorator(fn: Callable[..., Any]) -> Callable[..., Any]:
        @wraps(fn)
        def wrapped(*args: Any, **kwargs: Any):
            if not is_feature_enabled(db_session(), feature):
                raise FeatureDisabledError(f"Feature {feature.value} is disabled.")
            return fn(*args, **kwargs)

        return wrapped

    return decorator
