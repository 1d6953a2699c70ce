"""
Ricrea lo schema del database del distributore.

Elimina e ricrea tutte le tabelle (turni, erogatori, contabilità,
stipendi). Da usare solo in sviluppo: i dati esistenti vanno persi.

Uso:
    python reset_db.py --yes
"""

import argparse
import asyncio

from app.core.config import settings
from app.core.database import close_db, reset_schema


async def reset() -> None:
    print(f"Connessione al database ({settings.app_env}), ricreazione tabelle...")
    try:
        tables = await reset_schema()
    finally:
        await close_db()

    for name in tables:
        print(f"  - {name}")
    print("Database resettato con successo!")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Reset dello schema del distributore")
    parser.add_argument("--yes", action="store_true", help="Conferma l'eliminazione dei dati")
    args = parser.parse_args()

    if settings.is_production:
        raise SystemExit("Reset non consentito in produzione")
    if not args.yes:
        raise SystemExit("Operazione distruttiva: rilanciare con --yes")

    asyncio.run(reset())
