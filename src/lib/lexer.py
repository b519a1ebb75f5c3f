"""
Custom Pygments lexer for MD++ syntax highlighting

Highlights directive markup when MD++ source is shown in a ```mdpp,
```mdplus or ```mdsc fence.

Token types:
- Keyword.Declaration: Side-channel directives (ai-context, script, style, ...)
- Name.Tag: Component directive names (e.g., bootstrap:alert)
- Punctuation: Colon runs, brackets and braces
- Name.Attribute / Literal.String: Attribute keys and values
- Name.Variable: {{variable}} tokens in prompts
"""

from pygments.lexer import RegexLexer, bygroups, default
from pygments.token import (
    Comment,
    Generic,
    Keyword,
    Literal,
    Name,
    Operator,
    Punctuation,
    String,
    Text,
)


BUILTIN_NAMES = r'(?:ai-context|ai-generate|ai_generate|ai|script(?:[:_][\w-]+)?|style|link-css|linkcss|css-link|kroki)'


class MDPlusPlusLexer(RegexLexer):
    """
    Lexer for MD++ markup

    Example:
        :::bootstrap:alert[Heads up]{variant="info" .wide}
        Body with an :ai{prompt="Describe {{product}}"} placeholder.
        :::

    Tokens:
        ::: → Punctuation
        bootstrap:alert → Name.Tag
        [Heads up] → Punctuation + Generic.Emph
        variant → Name.Attribute
        "info" → Literal.String
    """

    name = 'MD++'
    aliases = ['mdpp', 'mdplus', 'mdsc', 'md++']
    filenames = ['*.mdplus', '*.mdp', '*.mdsc']

    tokens = {
        'root': [
            # Code fences are shown verbatim
            (r'^(```|~~~).*?\n[\s\S]*?^\1[ \t]*$', String.Backtick),

            # HTML comments
            (r'<!--[\s\S]*?-->', Comment),

            # GitHub-style callouts
            (r'^(>[ ]?)(\[!\w+\])(.*)$', bygroups(Punctuation, Keyword.Type, Generic.Strong)),

            # Built-in block directives
            (r'^([ \t]*)(:{2,})(' + BUILTIN_NAMES + r')(?=[\[{\s]|$)',
             bygroups(Text, Punctuation, Keyword.Declaration), 'head'),

            # Component block directives (framework:component or plain name)
            (r'^([ \t]*)(:{2,})([A-Za-z][\w-]*(?::[\w-]+)?)',
             bygroups(Text, Punctuation, Name.Tag), 'head'),

            # Closing fence
            (r'^([ \t]*)(:{3,})[ \t]*$', bygroups(Text, Punctuation)),

            # Headings
            (r'^#{1,6}[ \t].*$', Generic.Heading),

            # Inline built-in directive (:ai{...})
            (r'(?<![\w:])(:)(ai)(?=[\[{])', bygroups(Punctuation, Keyword.Declaration), 'head'),

            # Inline component directive
            (r'(?<![\w:])(:)([A-Za-z][\w-]*(?::[\w-]+)?)(?=[\[{])', bygroups(Punctuation, Name.Tag), 'head'),

            (r'\{\{\w+\}\}', Name.Variable),
            (r'[^:<`~>#{\n]+', Text),
            (r'\n', Text),
            (r'.', Text),
        ],

        'head': [
            (r'(\[)([^\]\n]*)(\])', bygroups(Punctuation, Generic.Emph, Punctuation)),
            (r'\{', Punctuation, 'attributes'),
            default('#pop'),
        ],

        'attributes': [
            (r'\}', Punctuation, '#pop:2'),
            (r'[.#][^\s{}"\'=.#]+', Name.Decorator),
            (r'([A-Za-z_:@][\w:.\-]*)(\s*=\s*)', bygroups(Name.Attribute, Operator)),
            (r'"[^"]*"', Literal.String),
            (r"'[^']*'", Literal.String),
            (r'\{\{\w+\}\}', Name.Variable),
            (r'[A-Za-z_:@][\w:.\-]*', Name.Attribute),
            (r'[^\s"\'}]+', Literal.String),
            (r'\s+', Text),
        ],
    }


def get_lexer() -> MDPlusPlusLexer:
    """
    Get the MDPlusPlusLexer instance

    Returns:
        MDPlusPlusLexer instance ready for use with Pygments
    """
    return MDPlusPlusLexer()
