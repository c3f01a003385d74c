"""
Climate summary orchestrator

Main entry point. Feeds every input file through the parser into a single
aggregation table, then prints the per-region report.
"""
import argparse
import logging
import sys
from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path
from typing import IO, Dict, List, Optional, Sequence, Set, Union

from .aggregator import AggregationTable
from .config import ClimateConfig, get_config
from .exceptions import (
    CapacityExceeded,
    ClimateSummaryError,
    NoUsableInput,
    RecordRejected,
    SourceUnreadable,
)
from .parser import create_parser
from .reader import iter_lines, open_source
from .report import RENDERERS, render

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

logger = logging.getLogger(__name__)


@dataclass
class SourceStats:
    """Line accounting for one input source"""
    source: str
    lines_read: int = 0
    accepted: int = 0
    blank: int = 0
    dropped: int = 0
    rejected: Dict[str, int] = field(default_factory=Counter)
    
    @property
    def rejected_total(self) -> int:
        return sum(self.rejected.values())
    
    @property
    def processed(self) -> bool:
        """A source counts as processed once it contributed a record"""
        return self.accepted > 0
    
    def to_dict(self) -> dict:
        return {
            "source": self.source,
            "lines_read": self.lines_read,
            "accepted": self.accepted,
            "blank": self.blank,
            "dropped": self.dropped,
            "rejected": dict(self.rejected),
        }


@dataclass
class RunSummary:
    """Outcome of a multi-source run"""
    sources: List[SourceStats] = field(default_factory=list)
    unreadable: List[str] = field(default_factory=list)
    
    @property
    def files_processed(self) -> int:
        return sum(1 for s in self.sources if s.processed)
    
    @property
    def records_accepted(self) -> int:
        return sum(s.accepted for s in self.sources)


class ClimateAnalyzer:
    """Runs the streaming aggregation pass over one or more sources"""
    
    def __init__(
        self,
        config: Optional[ClimateConfig] = None,
        table: Optional[AggregationTable] = None,
    ):
        """
        Initialize analyzer
        
        Args:
            config: Configuration (defaults to the global instance)
            table: Table to aggregate into (a new one is created if omitted)
        """
        self.config = config or get_config()
        self.parser = create_parser(self.config.max_line_length)
        self.table = table if table is not None else AggregationTable(self.config.max_regions)
        self._dropped_codes: Set[str] = set()
    
    def analyze_stream(self, stream: IO[str], source: str = "<stream>") -> SourceStats:
        """
        Aggregate every valid line of a text stream
        
        Args:
            stream: Open text stream
            source: Name used in statistics and log messages
        
        Returns:
            Line accounting for the stream
        """
        stats = SourceStats(source=source)
        
        for line in iter_lines(stream, self.config.max_line_length):
            stats.lines_read += 1
            
            if not line.strip():
                stats.blank += 1
                continue
            
            try:
                observation = self.parser.parse(line)
            except RecordRejected as e:
                stats.rejected[e.reason] += 1
                logger.debug(f"{source}:{stats.lines_read}: skipping line ({e.reason}): {e}")
                continue
            
            try:
                self.table.add(observation)
            except CapacityExceeded as e:
                stats.dropped += 1
                if e.code not in self._dropped_codes:
                    self._dropped_codes.add(e.code)
                    logger.warning(f"{source}: {e}; dropping its observations")
                continue
            
            stats.accepted += 1
        
        logger.info(
            f"Processed {source}: {stats.accepted} accepted, "
            f"{stats.rejected_total} rejected, {stats.dropped} dropped "
            f"of {stats.lines_read} lines"
        )
        return stats
    
    def analyze_file(self, path: Union[str, Path]) -> SourceStats:
        """
        Aggregate one input file
        
        Raises:
            SourceUnreadable: File could not be opened
        """
        with open_source(path, self.config.encoding) as stream:
            return self.analyze_stream(stream, source=str(path))
    
    def analyze_files(self, paths: Sequence[Union[str, Path]]) -> RunSummary:
        """
        Aggregate input files sequentially, in the order given
        
        Unreadable files and files with no usable records are logged and
        skipped; the table keeps whatever earlier files contributed.
        
        Args:
            paths: Input file paths
        
        Returns:
            Run summary with per-source statistics
        
        Raises:
            NoUsableInput: No file contributed any record
        """
        summary = RunSummary()
        
        for path in paths:
            try:
                stats = self.analyze_file(path)
            except SourceUnreadable as e:
                logger.warning(str(e))
                summary.unreadable.append(str(path))
                continue
            
            summary.sources.append(stats)
            if not stats.processed:
                logger.warning(f"Error processing file: {path}")
        
        logger.info(
            f"Run complete: {summary.files_processed}/{len(paths)} files processed, "
            f"{summary.records_accepted} records in {len(self.table)} regions"
        )
        
        if summary.files_processed == 0:
            raise NoUsableInput("No valid files were processed.")
        
        return summary


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging on stderr"""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        stream=sys.stderr,
    )


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Summarize NOAA tab-delimited climate observations per region"
    )
    parser.add_argument(
        "paths",
        nargs="*",
        help="TDV files to analyze"
    )
    parser.add_argument(
        "--format",
        dest="report_format",
        default=None,
        choices=list(RENDERERS.keys()),
        help="Report format (default: text)"
    )
    parser.add_argument(
        "--max-regions",
        type=int,
        default=None,
        help="Maximum number of distinct regions (default: unbounded)"
    )
    parser.add_argument(
        "--max-line-length",
        type=int,
        default=None,
        help="Longest accepted line in characters (default: 97)"
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Logging level (default: INFO)"
    )
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point for CLI"""
    args = build_arg_parser().parse_args(argv)
    
    overrides = {
        key: value
        for key, value in (
            ("report_format", args.report_format),
            ("max_regions", args.max_regions),
            ("max_line_length", args.max_line_length),
            ("log_level", args.log_level),
        )
        if value is not None
    }
    config = get_config().model_copy(update=overrides)
    
    configure_logging(config.log_level)
    
    if not args.paths:
        logger.error("Not enough arguments provided. No file provided to analyze.")
        return 1
    
    for path in args.paths:
        print(f"Opening file: {path}")
    
    try:
        if config.report_format not in RENDERERS:
            raise ValueError(f"Unknown report format: {config.report_format}")
        analyzer = ClimateAnalyzer(config)
    except ValueError as e:
        logger.error(f"Invalid configuration: {e}")
        return 1
    
    try:
        analyzer.analyze_files(args.paths)
    except ClimateSummaryError as e:
        logger.error(str(e))
        return 1
    
    report = render(analyzer.table.all(), config.report_format)
    
    sys.stdout.write(report)
    return 0


if __name__ == "__main__":
    sys.exit(main())
