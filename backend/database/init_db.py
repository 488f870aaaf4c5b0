# backend/database/init_db.py


def main():
    from backend.database.models import Base
    from backend.database.connection import get_engine
    Base.metadata.create_all(bind=get_engine())
    print("Staging tables created.")

if __name__ == "__main__":
    main()
