"""Stylesheet used when a book is exported without one"""

DEFAULT_STYLESHEET = """\
body {
    font-family: serif;
    line-height: 1.5;
    margin: 0 5%;
    text-align: justify;
    hyphens: auto;
}

h1, h2, h3, h4, h5, h6 {
    font-weight: normal;
    line-height: 1.2;
    text-align: center;
    hyphens: none;
    page-break-after: avoid;
}

h1 {
    font-size: 1.8em;
    margin: 3em 0 1.5em;
}

h2 {
    font-size: 1.4em;
    margin: 2em 0 1em;
}

h3 {
    font-size: 1.2em;
    margin: 1.5em 0 0.8em;
}

p {
    margin: 0;
    text-indent: 1.5em;
}

h1 + p, h2 + p, h3 + p, hr + p, blockquote + p {
    text-indent: 0;
}

hr {
    border: none;
    margin: 1.5em 0;
    text-align: center;
}

hr::after {
    content: "* * *";
}

blockquote {
    margin: 1em 2em;
    font-style: italic;
}

img {
    max-width: 100%;
}

table {
    border-collapse: collapse;
    margin: 1em auto;
}

td, th {
    border: 1px solid #999;
    padding: 0.3em 0.6em;
}

.footnotes {
    font-size: 0.85em;
}

.dedication, .colophon {
    margin-top: 30%;
    text-align: center;
    font-style: italic;
}

.dedication p, .colophon p {
    text-indent: 0;
}

.toc-list {
    list-style: none;
    padding-left: 0;
}

.toc-list .toc-list {
    padding-left: 1.5em;
}

.toc-list a {
    text-decoration: none;
}
"""
