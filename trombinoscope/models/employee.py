"""
Modèle employé (fiche du trombinoscope)
"""
from sqlalchemy import Column, Integer, String, Boolean, Date, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from datetime import datetime
from trombinoscope.database import Base


class Employee(Base):
    """Table des employés"""
    __tablename__ = "employees"

    id = Column(Integer, primary_key=True, index=True)
    nom = Column(String(100), nullable=False)
    prenom = Column(String(100), nullable=False)
    poste = Column(String(150), nullable=False)
    equipe = Column(String(100), nullable=False, index=True)
    responsable_equipe = Column(Boolean, default=False, nullable=False)
    email = Column(String(100), unique=True, nullable=True)
    telephone = Column(String(20), nullable=True)
    date_embauche = Column(Date, nullable=True)
    date_anniversaire = Column(Date, nullable=True)
    photo_url = Column(String(255), nullable=True)
    manager_id = Column(Integer, ForeignKey("employees.id"), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False, index=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    # Hiérarchie (non contrainte acyclique)
    manager = relationship("Employee", remote_side=[id], back_populates="subordinates")
    subordinates = relationship("Employee", back_populates="manager")

    @property
    def nom_complet(self) -> str:
        return f"{self.prenom} {self.nom}"

    @property
    def manager_nom_complet(self):
        return self.manager.nom_complet if self.manager is not None else None

    @property
    def nombre_subordonnes(self) -> int:
        return sum(1 for sub in self.subordinates if sub.is_active)

    def __repr__(self):
        return f"<Employee(id={self.id}, nom={self.nom}, equipe={self.equipe})>"
