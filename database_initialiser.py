import os
import shutil
import sqlite3
from datetime import datetime

from constants import (
    DATABASE_STRUCTURE,
    DATABASE_STRUCTURE_CREATIONSTRINGMAPPING,
    SQLITEFILE,
)
from logger import get_logger

log = get_logger("database")


def check_database_structure(db_file):
    conn = sqlite3.connect(db_file)
    try:
        c = conn.cursor()

        c.execute("SELECT name FROM sqlite_master WHERE type='table';")
        actual_tables = {row[0] for row in c.fetchall()}
        missing = []
        for table, expected_columns in DATABASE_STRUCTURE.items():
            if table not in actual_tables:
                log.info("Missing table: %s", table)
                missing.append({"type": "table", "table": table})
                for col in expected_columns:
                    missing.append({"type": "column", "table": table, "column": col})
                continue

            c.execute(f"PRAGMA table_info({table});")
            actual_columns = {row[1] for row in c.fetchall()}
            for col in expected_columns:
                if col not in actual_columns:
                    log.info("Missing column in %s: %s", table, col)
                    missing.append({"type": "column", "table": table, "column": col})

        extra, wrong_type = [], []
        for table in actual_tables:
            if table == "sqlite_sequence":
                continue
            if table not in DATABASE_STRUCTURE:
                extra.append({"type": "table", "table": table})
                continue
            c.execute(f"PRAGMA table_info({table});")
            colmap = DATABASE_STRUCTURE_CREATIONSTRINGMAPPING[table]
            for _, col, col_type, *_ in c.fetchall():
                if col not in DATABASE_STRUCTURE[table]:
                    extra.append({"type": "column", "table": table, "column": col})
                    continue
                if col not in colmap:
                    continue
                expected_type = colmap[col].split(" ")[0]
                if col_type.upper() != expected_type.upper():
                    wrong_type.append(
                        {
                            "table": table,
                            "column": col,
                            "type": col_type,
                            "expected_type": expected_type,
                        }
                    )

        return missing, extra, wrong_type
    finally:
        conn.close()


def reduce(entries):
    skip, reduced_list = [], []
    for entry in entries:
        if entry["type"] == "table":
            skip.append(entry["table"])
        elif entry["table"] in skip:
            continue
        reduced_list.append(entry)

    return reduced_list


def build_table_string(table):
    sqlstring = f"CREATE TABLE {table} ({DATABASE_STRUCTURE_CREATIONSTRINGMAPPING['Tables'][table]}"
    foreign_keys = None
    for coltitle, coltype in DATABASE_STRUCTURE_CREATIONSTRINGMAPPING[table].items():
        if coltitle == "foreignkeyconstraint":
            foreign_keys = coltype
            continue
        sqlstring += f", {coltitle} {coltype}"
    if foreign_keys:
        sqlstring += f", {foreign_keys}"
    sqlstring += ");"
    return sqlstring


def backup_db(db_file, backup_dir="backup"):
    if not os.path.exists(db_file):
        return None
    os.makedirs(backup_dir, exist_ok=True)
    target = os.path.join(
        backup_dir, f"{datetime.now().timestamp()}_{os.path.basename(db_file)}"
    )
    shutil.copy(db_file, target)
    return target


def repair_db(db_file, reduced_missing):
    conn = sqlite3.connect(db_file)
    try:
        c = conn.cursor()
        for missed in reduced_missing:
            table = missed["table"]
            match missed["type"]:
                case "table":
                    c.execute(build_table_string(table))
                    log.info("added %s", table)
                case "column":
                    col = missed["column"]
                    coltype = DATABASE_STRUCTURE_CREATIONSTRINGMAPPING[table].get(col)
                    if coltype is None:
                        log.warning("Can't add key column %s to existing table %s", col, table)
                        continue
                    c.execute(f"ALTER TABLE {table} ADD COLUMN {col} {coltype};")
                    log.info("added %s to %s", col, table)
        conn.commit()
    finally:
        conn.close()


def init_db(db_file=SQLITEFILE, backup=True):
    """Create the schema in ``db_file`` or add whatever parts of it are missing.

    Extra tables and columns are left alone, and columns whose declared type
    differs from the expected one are only reported.
    """
    missing, extra, wrong_type = check_database_structure(db_file)

    if missing:
        if backup:
            backup_db(db_file)
        repair_db(db_file, reduce(missing))
    for entry in reduce(extra):
        if entry["type"] == "table":
            log.warning("Unknown table %s left untouched", entry["table"])
        else:
            log.warning("Unknown column %s.%s left untouched", entry["table"], entry["column"])
    for entry in wrong_type:
        log.warning(
            "Column %s.%s is %s, expected %s",
            entry["table"],
            entry["column"],
            entry["type"],
            entry["expected_type"],
        )
    return missing, extra, wrong_type
