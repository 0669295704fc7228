from typing import Any, Callable, Generic, Optional, Sequence, Type, TypeVar

from sqlalchemy import delete as sa_delete
from sqlmodel import SQLModel, Session, select, func

from videoreview.db.models.base import utcnow
from videoreview.db.session import gateway_of

# Type générique pour le modèle (Project, Video, Comment, etc.)
ModelT = TypeVar("ModelT", bound=SQLModel)


class BaseRepository(Generic[ModelT]):
    """
    Repository de base pour les opérations CRUD standards.

    👉 Ne contient aucune logique métier.
    👉 Gère la persistance générique : create, read, update, delete, count, list.
    👉 "Introuvable" = None, jamais d'exception.
    👉 Les écritures passent par la passerelle (relance si la base SQLite est verrouillée).
    👉 Les repositories concrets définissent `model = MaClasseSQLModel`.
    """

    model: Type[ModelT]

    def __init__(self, session: Session):
        self.session = session

    @property
    def gateway(self):
        return gateway_of(self.session)

    def _write(self, apply: Callable[[], None], *, commit: bool) -> None:
        """
        commit=True : apply() + commit, rejoué sur verrou (rollback entre deux tentatives).
        commit=False : apply() + flush, dans la transaction orchestrée par le service.
        """
        if commit:
            self.gateway.transaction(self.session, lambda: (apply(), self.session.flush()))
        else:
            apply()
            self.session.flush()

    def _read(self, fn: Callable[[], Any]) -> Any:
        return self.gateway.call(fn)

    def _all(self, statement) -> Sequence[Any]:
        return self._read(lambda: self.session.exec(statement).all())

    def _first(self, statement) -> Optional[Any]:
        return self._read(lambda: self.session.exec(statement).first())

    # ---------- READ ----------

    def list(self, offset: int = 0, limit: int = 100) -> Sequence[ModelT]:
        """Retourne une liste paginée des enregistrements."""
        statement = select(self.model).offset(offset).limit(limit)
        return self._read(lambda: self.session.exec(statement).all())

    def count(self) -> int:
        """Retourne le nombre total d’enregistrements."""
        return self._read(lambda: self.session.exec(select(func.count(self.model.id))).one())

    def get(self, id_: Any) -> Optional[ModelT]:
        """Retourne un enregistrement par son identifiant, ou None."""
        return self._read(lambda: self.session.get(self.model, id_))

    def refresh(self, entity: ModelT) -> ModelT:
        """Relit l'enregistrement depuis la base (après un commit ou un UPDATE direct)."""
        self._read(lambda: self.session.refresh(entity))
        return entity

    # ---------- CREATE ----------

    def create(self, *, commit: bool = True, **fields) -> ModelT:
        """
        Crée et persiste un nouvel enregistrement puis le relit (insert puis select par id).
        commit=False permet d'orchestrer une transaction globale au niveau service.
        """
        entity = self.model(**fields)
        self._write(lambda: self.session.add(entity), commit=commit)
        if commit:
            self.refresh(entity)
        return entity

    # ---------- UPDATE ----------

    def update(self, entity: ModelT, *, commit: bool = True, **changes) -> ModelT:
        """
        Met à jour un enregistrement existant (updated_at rafraîchi).
        commit=False permet d'orchestrer une transaction globale au niveau service.
        """
        def apply() -> None:
            for key, value in changes.items():
                setattr(entity, key, value)
            if hasattr(entity, "updated_at"):
                entity.updated_at = utcnow()
            self.session.add(entity)

        self._write(apply, commit=commit)
        if commit:
            self.refresh(entity)
        return entity

    # ---------- DELETE ----------

    def delete(self, entity: ModelT, *, commit: bool = True) -> None:
        """
        Supprime un enregistrement.
        commit=False permet d'orchestrer une transaction globale au niveau service.
        """
        self._write(lambda: self.session.delete(entity), commit=commit)

    def delete_where(self, *criteria, commit: bool = True) -> None:
        """DELETE ... WHERE en une seule requête (suppressions en cascade)."""
        statement = sa_delete(self.model).where(*criteria)
        self._write(lambda: self.session.execute(statement), commit=commit)
