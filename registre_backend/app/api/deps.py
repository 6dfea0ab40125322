# registre_backend/app/api/deps.py
import logging
from typing import AsyncGenerator, Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ..config import get_settings
from ..database import get_db, get_session_factory
from ..schemas.registre import RequestUser
from ..services.data_retrieval import (
    ActiviteData,
    EvenementData,
    ExportConfigData,
    ExportDemandData,
    MentionDeServiceData,
    PriseDeServiceData,
    ServiceTreeData,
)
from ..services.export import (
    ExportAdmissionGuard,
    RecordAggregator,
    RegisterContentGenerator,
    RegisterPdfEngine,
    ReportAssembler,
    RegistreExportService,
)

logger = logging.getLogger(__name__)


# Tokens are issued by the identity provider; this service only reads them
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/token")


async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Dependency to get a database session."""
    async for session in get_db():
        yield session


def session_factory() -> async_sessionmaker:
    return get_session_factory()


async def get_request_user(token: str = Depends(oauth2_scheme)) -> RequestUser:
    """Read the requester identity and tagged root service from the JWT."""
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    settings = get_settings()
    try:
        payload = jwt.decode(
            token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM]
        )
        sub: Optional[str] = payload.get("sub")
        if sub is None:
            raise credentials_exception
        premier_noeud_tague = payload.get("premier_noeud_tague")
        return RequestUser(
            sub=sub,
            premier_noeud_tague=(
                int(premier_noeud_tague) if premier_noeud_tague is not None else None
            ),
        )
    except (JWTError, ValueError) as e:
        logger.warning(f"Token validation failed: {e}")
        raise credentials_exception


def get_registre_export_service(
    db: AsyncSession = Depends(db_session),
    factory: async_sessionmaker = Depends(session_factory),
) -> RegistreExportService:
    """Wire the register export with the database-backed collaborators."""
    settings = get_settings()
    engine = RegisterPdfEngine(title=settings.REGISTRE_DOCUMENT_TITLE)
    return RegistreExportService(
        config_source=ExportConfigData(db),
        admission_guard=ExportAdmissionGuard(ExportDemandData()),
        service_registry=ServiceTreeData(),
        aggregator=RecordAggregator(
            EvenementData(factory),
            MentionDeServiceData(factory),
            PriseDeServiceData(factory),
        ),
        assembler=ReportAssembler(
            engine, RegisterContentGenerator(), ActiviteData(db)
        ),
        page_factory=engine.get_default_page,
        export_type=settings.REGISTRE_EXPORT_TYPE,
    )
