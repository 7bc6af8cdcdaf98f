"""wtrexplorer default configuration file

Every configuration element ever used in the program must exist here.
These defaults may be overridden in the user's config file.

The variables guaranteed to be available besides these are set in config.environ()
"""


# Symbols that mark a passing test in the console output. Any other single symbol in the same
# position marks a failure.
result_pass_symbols = frozenset({'✓'})

# Symbols starting indented lines that aren't test results, such as the browser log header
result_ignore_symbols = frozenset({'🚧'})

# Symbol that starts a block of failure details, followed by the full path of the test
failure_marker = '❌'

# Text at the start of a line that ends a block of failure details. web-test-runner prints a
# progress line per browser and a final "Finished" line after the failures. End of the output
# always ends a block as well.
failure_terminators = ['Chromium', 'Firefox', 'Webkit', 'Finished']

# Separator between the suite and test names in the failure block path
failure_path_separator = '>'

# Separator placed between suite names and test name to make a full title when the test runner
# doesn't supply one
full_title_separator = ' > '

# Whether tests with the same title in one part of the test tree are left without a result,
# instead of all being given the same result
strict_correlation = False

# Path to root of captured output cache directory
output_cache_path = '{XDG_CACHE_HOME}/wtrexplorer'

# Don't compress a cached output file if it's shorter than this length.
# 128 is the normal maximum length allowed for data inline in ext4 inodes, so using this
# will cause absolutely no disk space increase for such files on such filesystems.
compress_threshold_bytes = 128

# Seconds to wait for a server when retrieving output from a URL
fetch_timeout_secs = 60
