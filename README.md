# minishell

A small interactive shell for POSIX systems. It reads command lines, expands
variables and wildcards, and runs pipelines of external programs and built-in
commands.

## Installing

    pip install .

## Running

    minishell

The shell takes no arguments; passing any prints an error and exits with
status 1. The prompt shows the value of `USER` when it is set (`alice $ `),
otherwise `$ `. Ctrl-C abandons the current line (status 1); Ctrl-D or `exit`
ends the session.

## What it understands

- Pipelines: `ls | grep py | wc -l`
- Redirections: `<`, `>`, `>>`, and here-documents with `<<` (variables in
  here-document lines are expanded)
- Single and double quotes, with backslash escapes of quotes inside them
- Variables: `$HOME`, `$PATH`, and `$?` for the last exit status; unset
  variables expand to nothing, text in single quotes is left alone
- Wildcards matched against the current directory: `*`, `*.py`, `test*`,
  `*util*` and `a*z`; a pattern that matches nothing is kept as written
- Built-ins:
  - `echo`, with one or more leading `-n` options to drop the newline
  - `cd`, which goes to `HOME` with no argument or one starting with `~`,
    and updates `PWD` and `OLDPWD`
  - `pwd` and `env`
  - `export`, which lists variables as `declare -x` lines when given no
    arguments
  - `unset`
  - `exit`, with an optional numeric status (non-numeric exits with 255,
    more than one argument is refused with status 1)

A line that starts or ends with `|`, has unbalanced quotes, or has an empty
pipeline stage is rejected with `minishell: syntax error` and status 258. A
missing command gives status 127, a directory given as a command 126.

A built-in that is the only command on the line runs in the shell itself, so
`cd`, `export` and `unset` change the session. Inside a longer pipeline a
built-in works on a copy and its changes are discarded.

## Using it from Python

    from minishell.shell import Shell

    shell = Shell({"PATH": "/usr/bin:/bin", "USER": "alice"})
    status = shell.run_line("echo hello | tr a-z A-Z")

`Shell.run_line()` returns the exit status of the line and raises
`minishell.builtins.ShellExit` when the line runs `exit`. `Shell.loop()` runs
the interactive read–execute loop, and `minishell.shell.main()` is the
command-line entry point.

The pieces can also be used on their own: `minishell.lexer.split_commands`
and `split_words` split lines, `minishell.expansion.expand_variables` expands
variable references, `minishell.wildcards.expand_command` expands patterns,
`minishell.parser.parse_pipeline` builds `Command` objects and
`minishell.executor.execute` runs them.

## What it does not do

There are no command lists or conditionals (`;`, `&&`, `||`), no background
jobs or job control, no subshells or command substitution, no shell
functions or scripts, and no history kept between sessions. Wildcards match
names in the current directory only, and a pattern with a `*` in the middle
uses only the parts before and after its first inner `*`.

## Running the tests

    pip install .[test]
    pytest