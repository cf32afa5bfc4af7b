# smithsql

smithsql sends randomly generated, reproducible SQL to in-memory SQLite
databases and counts how each statement turns out. Every statement comes from
a seeded generator, so a run can be repeated exactly.

It generates `SELECT`, `INSERT`, `UPDATE`, `DELETE`, `VACUUM`, `PRAGMA`,
`CREATE TRIGGER`, `DROP TRIGGER` and date/time function statements against the
tables the database schema defines. It picks the statement kind by
configurable weights.

## Installation

```
pip install .
```

To run the test suite:

```
pip install ".[test]"
pytest
```

## The schema file

Every database is created in memory from the SQL script
`assets/sqlite/tpcc-create-table.sql`, read relative to the working directory.
The script must define a `warehouse` table with the columns `w_id`, `w_name`,
`w_ytd`, `w_tax`, `w_street_1`, `w_street_2`, `w_city`, `w_state` and `w_zip`.
After loading the script the driver checks that `warehouse` starts empty, and
that a test row can be inserted, read back and deleted. `smithsql.drivers.DriverError`
is raised if the file cannot be read, if the script fails, or if that check
fails. The package does not ship this file.

## The profile

Both commands read their settings from `profile.json` in the working
directory. If the file is missing or does not hold a valid profile, the default
profile is written there and used:

```json
{
  "driver": "SQLITE_IN_MEM",
  "count": 8,
  "executor_count": 5,
  "thread_per_exec": 5,
  "stmt_prob": {
    "DELETE": 20,
    "SELECT": 100,
    "INSERT": 50,
    "UPDATE": 50,
    "VACUUM": 20,
    "PRAGMA": 10,
    "CREATE_TRIGGER": 10,
    "DROP_TRIGGER": 10,
    "DATE_FUNC": 20
  },
  "debug": {
    "show_success_sql": false,
    "show_failed_sql": true
  },
  "seed": 0
}
```

- `driver`: `SQLITE_IN_MEM` (see *Limitations* for `LIMBO_IN_MEM`).
- `count`: the number of statements each worker thread runs.
- `executor_count`: the number of executor processes the server starts for each run.
- `thread_per_exec`: the number of worker threads in one executor. Each thread opens its own
  database and uses the executor seed plus its thread number.
- `stmt_prob`: relative weights of the statement kinds. When all of them are
  zero, every statement is `SELECT 1;`. If a generator has nothing to work
  with, for example because there are no tables, `SELECT 1;` is used as well.
- `debug`: whether successful and failing statements are logged.
- `seed`: the base seed.

## Running a single executor

```
smithsql-executor
```

`python -m smithsql.executor` does the same. The seed comes from the
`EXEC_PARAM_SEED` environment variable when it holds an unsigned 64-bit number.
Otherwise it comes from the profile. The executor runs its worker threads and
logs three counts: statements that succeeded, statements that failed with an
expected error (constraint violations, `sqlite3.IntegrityError`), and
statements that failed with any other error. It also logs a count for each
statement kind. It then posts these statistics as JSON to
`http://127.0.0.1:8080/internal/stat/submit`. If that fails, only a warning is
logged.

## Running the server

```
smithsql-server
```

The server listens on `127.0.0.1:8080` and allows cross-origin requests:

| Method | Path                     | Purpose                                                     |
|--------|--------------------------|-------------------------------------------------------------|
| GET    | `/profile/get`           | the current profile as JSON                                 |
| POST   | `/profile/put`           | replace `profile.json` with the JSON body (400 if invalid)  |
| GET    | `/run`                   | start `executor_count` executors and wait for them to end   |
| GET    | `/internal/stat/collect` | statistics aggregated over all submitted executors          |
| POST   | `/internal/stat/submit`  | executors submit their statistics here                      |

On `/run`, executor `n` gets the seed `(seed << 8) + n`. Each executor is
started as `python -m smithsql.executor` with the current interpreter. When an
executor cannot be started, the server process exits with status 1.

A submission is refused with 400 if its `executor_id` is not an unsigned
32-bit number. The aggregate adds up the query counts and thread counts,
merges the counts per kind, and keeps the longest elapsed time. Queries per
second and the error rate are computed from those totals. The error rate is
the share of failures with unexpected errors, as a percentage. Before anything
has been submitted, `/internal/stat/collect` returns zeros and the message
"No executor statistics collected yet".

## Using it as a library

```python
from smithsql.rng import LcgRng
from smithsql.values import generate_value_by_type
from smithsql.datefunc import gen_datefunc_stmt

rng = LcgRng(42)
print(generate_value_by_type("INTEGER", rng))
print(gen_datefunc_stmt(rng))
```

`LcgRng` yields the same sequence for the same seed, so every generator
produces the same statements again.

- `smithsql.schema.get_tables` reads the tables and columns of an open
  `sqlite3` connection. The generators that need a schema take its tables.
- `smithsql.generator.get_stmt_by_seed(conn, rng, kind)` generates a statement
  for a `SqlKind`.
- `generate_sql_by_prob` draws a kind by the weights of a `StmtProb`.
- `smithsql.drivers.SqliteDriver` is a context manager around the in-memory
  database. It provides `exec` and `query`.
- `smithsql.engine.SqliteEngine` runs a whole threaded session.

Logs go to standard output and are also appended to a log file in the working
directory.

## Limitations

- Only SQLite is supported. A profile naming `LIMBO_IN_MEM` is accepted, but
  creating its driver or engine raises `DriverError`.
- The schema script is not included and has to be provided as described above.
  Generated `CREATE TRIGGER` statements insert into a `trigger_log` table, so
  those triggers only work if the schema defines one.
- The server keeps aggregated statistics in memory only. They are lost on
  restart, and `active_executors` is always reported as 0.
- The server has no authentication.