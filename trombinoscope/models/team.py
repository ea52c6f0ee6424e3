"""
Modèle équipe
Les statistiques d'équipe restent calculées à partir de employees.equipe
"""
from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, ForeignKey
from datetime import datetime
from trombinoscope.database import Base


class Team(Base):
    """Table des équipes"""
    __tablename__ = "teams"

    id = Column(Integer, primary_key=True, index=True)
    nom_equipe = Column(String(100), unique=True, nullable=False)
    description = Column(Text, nullable=True)
    manager_id = Column(Integer, ForeignKey("employees.id"), nullable=True)
    departement = Column(String(100), nullable=True)
    couleur_theme = Column(String(7), default="#3498db", nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    def __repr__(self):
        return f"<Team(id={self.id}, nom_equipe={self.nom_equipe})>"
